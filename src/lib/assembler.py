"""
Module assembly

Wraps the output of a finished tag-tree compilation into one JavaScript
module:

    let xmlRuntime = require('<runtime>');
    let { Label, StackLayout } = require('<ui>');
    xmlRuntime.registerModule('<resolved>', () => require('<raw>'));
    function updateBindings1(...) { ... }
    export default class MainPage {
      constructor(moduleExportsFallback = null) {
        let customModules = { ... };
        ...
        resolvedCssModuleName && el0.addCssFile(resolvedCssModuleName);
        return el0;
      }
    }
    MainPage.isXMLComponent = true;

Documents carrying an XML declaration are not compiled; they become a module
exporting the raw text.
"""

import posixpath
import re
from typing import List

from . import jsast
from .binding import RUNTIME_REFERENCE_NAME
from .codegen import code_generate
from .log import LOG
from ..config import appsettings
from ..models.output import OutputModule
from ..models.state import CompilerState


RAW_XML_IDENTIFIER = 'RAW_XML_CONTENT'

WORD_PATTERN = re.compile(r'[A-Z]?[a-z0-9]+|[A-Z]+(?![a-z])')


def name_pascalCase(name: str) -> str:
    """
    Convert a file base name to a class name.

    Example:
        >>> name_pascalCase('main-page')
        'MainPage'
        >>> name_pascalCase('XMLView_item')
        'XmlViewItem'
    """
    words = WORD_PATTERN.findall(name)
    return ''.join(word.capitalize() for word in words)


def modulePath_strip(module_relative_path: str) -> str:
    """'views/main-page.xml' -> 'views/main-page'"""
    return posixpath.splitext(module_relative_path)[0]


def path_resolve(uri: str, module_dir: str) -> str:
    """
    Resolve a path written in markup.

    '~/' paths are relative to the app root; anything else is relative to
    the directory of the document.

    Example:
        >>> path_resolve('~/components/card.xml', 'views')
        'components/card.xml'
        >>> path_resolve('../shared/card', 'views/home')
        'views/shared/card'
    """
    if uri.startswith('~/'):
        return uri[2:]
    return posixpath.normpath(posixpath.join(module_dir, uri))


class ModuleAssembler:
    """
    Build the output module of one document.

    Args:
        module_relative_path: Document path relative to the app root
    """

    def __init__(self, module_relative_path: str) -> None:
        self.module_relative_path = module_relative_path
        base_name = posixpath.basename(modulePath_strip(module_relative_path))
        self.component_name = name_pascalCase(base_name) or 'Component'

    @staticmethod
    def imports_build(used_tags: List[str]) -> List[jsast.Node]:
        statements: List[jsast.Node] = [
            jsast.let(RUNTIME_REFERENCE_NAME, jsast.require(appsettings.runtime_module)),
        ]
        if used_tags:
            pattern = jsast.ObjectPattern([
                jsast.ObjectProperty(jsast.ident(tag), jsast.ident(tag), shorthand=True)
                for tag in used_tags
            ])
            statements.append(jsast.VariableDeclaration(
                'let', [jsast.VariableDeclarator(pattern, jsast.require(appsettings.ui_module))],
            ))
        return statements

    def constructor_build(self, state: CompilerState) -> jsast.ClassMethod:
        root = jsast.ident(appsettings.elementName_make(0))
        css_module = jsast.ident('resolvedCssModuleName')

        body: List[jsast.Node] = [
            jsast.let('customModules', jsast.ObjectExpression(list(state.custom_module_properties))),
        ]
        body.extend(state.constructor_body)
        body.append(jsast.statement(jsast.LogicalExpression(
            '&&', css_module, jsast.call(jsast.member(root, 'addCssFile'), css_module),
        )))
        body.append(jsast.ReturnStatement(root))

        return jsast.ClassMethod(
            jsast.ident('constructor'),
            [jsast.AssignmentPattern(jsast.ident('moduleExportsFallback'), jsast.NullLiteral())],
            jsast.BlockStatement(body),
        )

    def module_assemble(self, state: CompilerState) -> OutputModule:
        """
        Assemble the module of a compiled document.

        Args:
            state: State of a tag-tree compilation whose root view closed

        Returns:
            OutputModule with the syntax tree and printed code
        """
        used_tags = sorted(state.used_tags)
        class_name = jsast.ident(self.component_name)

        body: List[jsast.Node] = self.imports_build(used_tags)
        body.extend(state.registrations)
        body.extend(state.callbacks)
        body.append(jsast.ExportDefaultDeclaration(
            jsast.ClassDeclaration(class_name, [self.constructor_build(state)]),
        ))
        body.append(jsast.assign(
            jsast.member(jsast.ident(self.component_name), 'isXMLComponent'), jsast.BooleanLiteral(True),
        ))

        program = jsast.Program(body)
        LOG(
            f'Assembled {self.component_name}: {len(used_tags)} tags, '
            f'{len(state.registrations)} namespaces, {len(state.callbacks)} callbacks',
            level=2,
        )
        return OutputModule(
            component_name=self.component_name,
            program=program,
            code=code_generate(program),
            used_tags=set(used_tags),
            registrations=list(state.registrations),
            callbacks=list(state.callbacks),
            paths_to_resolve=list(state.paths_to_resolve),
        )

    @staticmethod
    def rawXml_assemble(content: str) -> OutputModule:
        """Module exporting content verbatim as RAW_XML_CONTENT"""
        program = jsast.Program([
            jsast.let(RAW_XML_IDENTIFIER, jsast.string(content), kind='const'),
            jsast.ExportDefaultDeclaration(jsast.ident(RAW_XML_IDENTIFIER)),
        ])
        return OutputModule(component_name='', program=program, code=code_generate(program))
