"""
Tag-tree compiler

A stateful walker over the tag events of one document. Each event handler
validates nesting against the open-tag stack and writes construction
statements into statement buffers:

    tagOpening_handle(name)             validate, push a TagContext
    attribute_handle(name, value)       record one attribute
    tagOpened_handle(name, attributes)  emit construction and property code
    tagClosing_handle(name)             flush children, pop the context

Buffers are shared on purpose. A view writes into its parent's buffer, so
the root's buffer is the exported constructor body. Property, template and
slotContent tags get their own buffer, which is later spliced into the
parent, wrapped in a factory function, or collected into an array.

Errors are raised where they are detected and handled at the event
boundary: the channel reports them and, in lenient mode, the offending tag
is marked ignored so that its whole subtree is skipped.
"""

import copy
import posixpath
from typing import Dict, List, Optional, Tuple

from . import jsast
from .assembler import modulePath_strip, path_resolve
from .binding import BindingExpressionCompiler
from .callbacks import BindingCallbackGenerator, propertyPath_split, runtime_call
from .errors import AbnormalStateChannel, CompilerError, StructuralError
from .log import LOG
from ..config import appsettings
from ..models.binding import AttributeItem
from ..models.options import CompilerOptions
from ..models.state import CompilerState
from ..models.tags import ElementKind, KNOWN_PLATFORMS, SpecialTags, TagContext


CODE_FILE = 'codeFile'
CSS_FILE = 'cssFile'
NAMESPACE_PREFIX = 'xmlns'
EVENT_PREFIX = 'on'
BINDING_CONTEXT_ATTRIBUTE = 'bindingContext'

SLOT_ATTRIBUTE = 'slot'
SLOT_NAME_ATTRIBUTE = 'name'
DEFAULT_SLOT_NAME = 'default'

TEMPLATE_KEY_ATTRIBUTE = 'key'
TEMPLATE_SUFFIX = 'Template'
TEMPLATE_ARRAY_SUFFIX = 'Templates'

SKIPPED_ATTRIBUTES = (SLOT_ATTRIBUTE, NAMESPACE_PREFIX, CODE_FILE, CSS_FILE)


def name_split(name: str) -> Tuple[str, Optional[str]]:
    """'c:Card' -> ('Card', 'c'), 'Label' -> ('Label', None)"""
    prefix, separator, local = name.partition(':')
    if not separator:
        return name, None
    return local, prefix


class TagTreeCompiler:
    """
    Compile a stream of tag events into construction code.

    Args:
        options: Compilation options
        channel: Error channel; created from options.strict when omitted

    Attributes:
        state: Everything the walk mutates (see CompilerState)

    Example:
        >>> compiler = TagTreeCompiler(CompilerOptions(platform='ios'))
        >>> compiler.tagOpening_handle('StackLayout')
        >>> compiler.tagOpened_handle('StackLayout', {})
        >>> compiler.tagClosing_handle('StackLayout')
        >>> compiler.state.is_initialized
        True
    """

    def __init__(
        self,
        options: Optional[CompilerOptions] = None,
        channel: Optional[AbnormalStateChannel] = None,
    ) -> None:
        self.options = options if options is not None else CompilerOptions()
        self.channel = channel if channel is not None else AbnormalStateChannel(strict=self.options.strict)
        self.state = CompilerState()

        self.module_path = modulePath_strip(self.options.module_relative_path)
        self.module_dir = posixpath.dirname(self.module_path)
        self.platform = self.options.platform.lower()

        self.binding_compiler = BindingExpressionCompiler(self.channel)
        self.callback_generator = BindingCallbackGenerator()

    # ------------------------------------------------------------------
    # Helpers

    @staticmethod
    def element_ident(index: int) -> jsast.Identifier:
        return jsast.ident(appsettings.elementName_make(index))

    @staticmethod
    def slotViews_ident(index: int) -> jsast.Identifier:
        return jsast.ident(f'slotViews{index}')

    @staticmethod
    def platformTag_is(name: str) -> bool:
        return name.lower() in KNOWN_PLATFORMS

    def platform_matches(self, name: str) -> bool:
        return name.lower() == self.platform

    def parent_get(self) -> Optional[TagContext]:
        """Context below the top of the stack"""
        stack = self.state.stack
        return stack[-2] if len(stack) > 1 else None

    # ------------------------------------------------------------------
    # Tag opening

    def tagOpening_handle(self, name: str) -> None:
        """
        Start a tag: gate platform tags, validate nesting, push a context.

        Args:
            name: Tag name as written in markup
        """
        state = self.state

        if self.platformTag_is(name):
            if not self.platform_matches(name):
                state.suppressed_platform_depth += 1
            state.attribute_target = None
            return
        if state.suppressed_platform_depth:
            state.attribute_target = None
            return

        parent = state.top
        if parent is not None and parent.ignored:
            self.ignored_push(name)
            return

        try:
            context = self.context_create(name, parent)
        except CompilerError as error:
            self.channel.error_notify(error)
            self.ignored_push(name)
            return

        if parent is not None:
            parent.has_open_child_tag = True
            parent.nested_tag_count += 1

        state.stack.append(context)
        state.attribute_target = context
        LOG(f"Opening '{name}' ({context.kind.name if context.kind else 'SLOT_CONTENT'})", level=3)

    def ignored_push(self, name: str) -> None:
        """Push a context whose subtree is skipped"""
        parent = self.state.top
        if parent is not None:
            parent.has_open_child_tag = True

        context = TagContext(name, ignored=True)
        self.state.stack.append(context)
        self.state.attribute_target = context

    def context_create(self, name: str, parent: Optional[TagContext]) -> TagContext:
        """
        Build the context of a new tag.

        Raises:
            StructuralError: If the tag may not appear here
        """
        if self.state.is_initialized:
            raise StructuralError(f'Invalid element {name}. Components can only have a single root view')

        if parent is not None:
            self.nesting_check(parent, name)

        if '.' in name:
            return self.propertyContext_create(name, parent)

        if name == SpecialTags.SLOT_CONTENT:
            if parent is None:
                raise StructuralError(f"Invalid tag '{name}'. Tag has no parent")
            return TagContext(name, index=parent.index)

        if name == SpecialTags.TEMPLATE:
            if parent is None:
                raise StructuralError('Template tags can only be nested inside template properties. Parent tag: None')
            return TagContext(name, kind=ElementKind.KEYED_TEMPLATE, index=parent.index)

        return TagContext(name, kind=ElementKind.VIEW)

    @staticmethod
    def propertyContext_create(name: str, parent: Optional[TagContext]) -> TagContext:
        parent_name, _, property_name = name.partition('.')

        if parent is None or parent.kind is not ElementKind.VIEW:
            parent_full_name = parent.full_name if parent is not None else 'None'
            raise StructuralError(
                f"Property '{name}' can only be nested inside a view tag. Parent tag: {parent_full_name}"
            )
        if parent.tag_name != parent_name:
            raise StructuralError(f"Property '{name}' is not suitable for parent '{parent.tag_name}'")

        if property_name.endswith(TEMPLATE_ARRAY_SUFFIX):
            kind = ElementKind.TEMPLATE_ARRAY
        elif property_name.endswith(TEMPLATE_SUFFIX):
            kind = ElementKind.TEMPLATE
        else:
            kind = ElementKind.COMMON_PROPERTY

        return TagContext(parent_name, kind=kind, index=parent.index, property_name=property_name)

    def nesting_check(self, parent: TagContext, name: str) -> None:
        """
        Validate a new tag against its parent.

        Raises:
            StructuralError: On any nesting violation
        """
        if name == SpecialTags.SLOT and self.state.in_slot_fallback:
            raise StructuralError('Cannot declare a slot inside slot fallback scope')

        if name == SpecialTags.SLOT_CONTENT:
            if self.state.in_slot_fallback:
                raise StructuralError('Cannot nest slot content inside a slot')
            if not parent.is_custom_component:
                raise StructuralError(
                    f"Invalid tag '{name}'. Can only nest slot content inside custom component tags"
                )
            if parent.is_parent_for_slots:
                raise StructuralError(f"Invalid tag '{name}'. View already contains a slot content tag")

        is_single_child_parent = parent.kind in (ElementKind.TEMPLATE, ElementKind.KEYED_TEMPLATE) or (
            parent.kind is ElementKind.VIEW and parent.tag_name == SpecialTags.SLOT
        )
        if is_single_child_parent and parent.nested_tag_count:
            raise StructuralError(f"Tag '{parent.full_name}' does not accept more than a single nested element")

        if parent.kind is ElementKind.TEMPLATE_ARRAY:
            if name != SpecialTags.TEMPLATE:
                raise StructuralError(f"Property '{parent.full_name}' must be an array of templates")
        elif name == SpecialTags.TEMPLATE:
            raise StructuralError(
                f'Template tags can only be nested inside template properties. Parent tag: {parent.full_name}'
            )

    # ------------------------------------------------------------------
    # Attributes

    def attribute_handle(self, name: str, value: str) -> None:
        target = self.state.attribute_target
        if target is not None:
            target.attributes[name] = value

    def attributeItem_get(self, name: str, value: str, context: TagContext) -> Optional[AttributeItem]:
        """
        Classify one attribute of a view tag.

        Returns:
            AttributeItem, or None if the attribute produces no code
            (special names, other platforms, bindingContext)
        """
        local, prefix = name_split(name)

        if name in SKIPPED_ATTRIBUTES or prefix == NAMESPACE_PREFIX:
            return None

        if prefix is not None and prefix.lower() in KNOWN_PLATFORMS and prefix.lower() != self.platform:
            return None

        if local == BINDING_CONTEXT_ATTRIBUTE:
            self.channel.warning_notify(
                f"Attribute '{name}' of '{context.tag_name}' is ignored. "
                f"The binding context is inherited from the parent view"
            )
            return None

        formatter = self.options.attribute_value_formatter
        if formatter is not None:
            value = formatter(value, local, context.tag_name, context.attributes)
            if value is None:
                value = ''

        is_event_listener = prefix == EVENT_PREFIX
        return AttributeItem(
            name=name,
            property_name=local,
            prefix=prefix,
            value=value,
            is_event_listener=is_event_listener,
            is_sub_property=not is_event_listener and '.' in local,
            is_binding=self.options.use_data_binding and BindingExpressionCompiler.value_isBinding(value),
        )

    def propertySet_build(self, index: int, item: AttributeItem) -> jsast.Node:
        element = self.element_ident(index)

        if item.is_event_listener:
            handler = jsast.member(jsast.ident('moduleExports'), item.value, optional=True)
            return jsast.statement(runtime_call(
                'setEventListener', element, jsast.string(item.property_name), handler,
            ))

        if item.is_sub_property:
            owner, name = propertyPath_split(element, item.property_name)
            return jsast.statement(jsast.LogicalExpression(
                '&&', owner,
                runtime_call('setPropertyValue', owner, jsast.string(name), jsast.string(item.value)),
            ))

        return jsast.statement(runtime_call(
            'setPropertyValue', element, jsast.string(item.property_name), jsast.string(item.value),
        ))

    def attributes_apply(self, context: TagContext) -> List[jsast.Node]:
        """Property statements for plain values; bindings go to context.descriptors"""
        statements: List[jsast.Node] = []
        for name, value in context.attributes.items():
            item = self.attributeItem_get(name, value, context)
            if item is None:
                continue
            if item.is_binding:
                descriptor = self.binding_compiler.descriptor_compile(item)
                if descriptor is not None:
                    context.descriptors.append(descriptor)
                continue
            statements.append(self.propertySet_build(context.index, item))
        return statements

    # ------------------------------------------------------------------
    # Namespaces

    def namespace_lookup(self, prefix: str, declared: Dict[str, str], tag_name: str) -> str:
        """
        Resolved module path of an element prefix.

        Raises:
            StructuralError: If no open tag declares the prefix
        """
        if prefix in declared:
            return path_resolve(declared[prefix], self.module_dir)
        for context in reversed(self.state.stack):
            if prefix in context.namespaces:
                return context.namespaces[prefix]
        raise StructuralError(f"Unknown namespace prefix '{prefix}' of element '{tag_name}'")

    def namespace_register(self, context: TagContext, prefix: str, raw_path: str) -> None:
        """Activate xmlns:prefix for the tag's scope and register its module once"""
        state = self.state
        resolved = path_resolve(raw_path, self.module_dir)

        context.namespaces[prefix] = resolved
        state.paths_to_resolve.append(raw_path)

        if resolved in state.registered_paths:
            return
        state.registered_paths.add(resolved)

        state.registrations.append(jsast.statement(runtime_call(
            'registerModule',
            jsast.string(resolved),
            jsast.ArrowFunctionExpression([], jsast.require(raw_path)),
        )))
        extension = 'xml' if resolved.endswith('.xml') else ''
        state.custom_module_properties.append(jsast.ObjectProperty(
            jsast.string(resolved),
            runtime_call('loadCustomModule', jsast.string(resolved), jsast.string(extension)),
        ))
        LOG(f"Registered namespace '{prefix}' -> {resolved}", level=3)

    # ------------------------------------------------------------------
    # Tag opened

    def tagOpened_handle(self, name: str, attributes: Optional[Dict[str, str]] = None) -> None:
        """
        Emit the code of a tag whose attributes are complete.

        Args:
            name: Tag name as written in markup
            attributes: All attributes in document order; when omitted, the
                        ones delivered through attribute_handle() are used
        """
        state = self.state
        context = state.attribute_target
        state.attribute_target = None

        if context is None or context.ignored:
            return
        if attributes is not None:
            context.attributes = dict(attributes)

        try:
            self.context_open(context)
        except CompilerError as error:
            self.channel.error_notify(error)
            context.ignored = True

    def context_open(self, context: TagContext) -> None:
        parent = self.parent_get()

        if context.kind is ElementKind.VIEW:
            self.view_open(context, parent)
        elif context.kind is ElementKind.KEYED_TEMPLATE:
            self.keyedTemplate_open(context, parent)
        elif context.kind is None:
            parent.is_parent_for_slots = True
        else:
            self.property_open(context, parent)

    def property_open(self, context: TagContext, parent: TagContext) -> None:
        target = jsast.member(self.element_ident(context.index), context.property_name)

        if context.kind is ElementKind.TEMPLATE:
            factory = jsast.ArrowFunctionExpression([], jsast.BlockStatement(context.buffer.statements))
            parent.buffer.append(jsast.assign(target, factory))
        elif context.kind is ElementKind.TEMPLATE_ARRAY:
            parent.buffer.append(jsast.assign(target, jsast.ArrayExpression(context.buffer.statements)))
        # common properties are spliced into the parent when they close

    def keyedTemplate_open(self, context: TagContext, parent: TagContext) -> None:
        key = context.attributes.get(TEMPLATE_KEY_ATTRIBUTE, '')
        if not key:
            raise StructuralError(
                f"Tag '{context.tag_name}' inside '{parent.full_name}' "
                f"requires a non-empty '{TEMPLATE_KEY_ATTRIBUTE}' attribute"
            )

        parent.buffer.append(jsast.ObjectExpression([
            jsast.ObjectProperty(jsast.ident(TEMPLATE_KEY_ATTRIBUTE), jsast.string(key)),
            jsast.ObjectProperty(
                jsast.ident('createView'),
                jsast.ArrowFunctionExpression([], jsast.BlockStatement(context.buffer.statements)),
            ),
        ]))

    def view_open(self, context: TagContext, parent: Optional[TagContext]) -> None:
        state = self.state
        attributes = context.attributes

        declared = {}
        for name, value in attributes.items():
            local, prefix = name_split(name)
            if prefix == NAMESPACE_PREFIX:
                declared[local] = value

        local_name, prefix = name_split(context.tag_name)
        module_path = None
        if prefix is not None:
            module_path = self.namespace_lookup(prefix, declared, context.tag_name)

        for namespace, raw_path in declared.items():
            self.namespace_register(context, namespace, raw_path)

        is_fallback = (
            parent is not None and parent.kind is ElementKind.VIEW and parent.tag_name == SpecialTags.SLOT
        )
        if not is_fallback:
            state.tree_index += 1
        context.index = state.tree_index

        if parent is None:
            context.buffer = state.constructor_body
            state.constructor_body.extend(self.scriptAndStyle_build(attributes))
        else:
            context.buffer = parent.buffer
            self.child_record(context, parent)
        context.splice_index = len(context.buffer)

        if context.tag_name == SpecialTags.SLOT:
            self.slot_open(context)
            return

        if module_path is not None:
            context.is_custom_component = True
            context.buffer.append(jsast.let(self.slotViews_ident(context.index).name, jsast.ObjectExpression()))
            context.splice_index = len(context.buffer)
            statements = self.customElement_build(context.index, local_name, module_path, is_fallback)
        else:
            state.used_tags.add(local_name)
            statements = self.construction_build(
                context.index, jsast.NewExpression(jsast.ident(local_name)), is_fallback,
            )

        statements.extend(self.attributes_apply(context))
        context.buffer.extend(statements)
        LOG(f"View '{context.tag_name}' -> {appsettings.elementName_make(context.index)}", level=3)

    @staticmethod
    def child_record(context: TagContext, parent: TagContext) -> None:
        if context.tag_name == SpecialTags.SLOT:
            # slots yield arrays, their parent has to spread them
            parent.slot_child_indices.append(context.index)

        if parent.kind is None:
            slot_name = context.attributes.get(SLOT_ATTRIBUTE) or DEFAULT_SLOT_NAME
            parent.slot_map.setdefault(slot_name, []).append(context.index)
        else:
            parent.child_indices.append(context.index)

    def scriptAndStyle_build(self, attributes: Dict[str, str]) -> List[jsast.Node]:
        """Declarations of the root: code and style module names, module exports"""
        paths = {}
        for attribute in (CODE_FILE, CSS_FILE):
            if attribute in attributes:
                raw_path = attributes[attribute]
                paths[attribute] = path_resolve(raw_path, self.module_dir)
                self.state.paths_to_resolve.append(raw_path)
            else:
                paths[attribute] = self.module_path

        code_module = jsast.ident('resolvedCodeModuleName')
        return [
            jsast.let(code_module.name, runtime_call(
                'resolveModuleName', jsast.string(paths[CODE_FILE]), jsast.string(''),
            )),
            jsast.let('resolvedCssModuleName', runtime_call(
                'resolveModuleName', jsast.string(paths[CSS_FILE]), jsast.string('css'),
            )),
            jsast.let('moduleExports', jsast.ConditionalExpression(
                code_module,
                runtime_call('loadModule', code_module, jsast.BooleanLiteral(True)),
                jsast.ident('moduleExportsFallback'),
            )),
        ]

    def construction_build(self, index: int, new_expression: jsast.Node, is_fallback: bool) -> List[jsast.Node]:
        element = self.element_ident(index)
        if is_fallback:
            return [
                jsast.assign(element, new_expression),
                jsast.statement(jsast.call(jsast.member(jsast.ident('fallbackViews'), 'push'), element)),
            ]
        return [jsast.let(element.name, new_expression)]

    def customElement_build(self, index: int, class_name: str, module_path: str, is_fallback: bool) -> List[jsast.Node]:
        """
        Construct a custom element with its slot views exposed on the prototype
        for the duration of the constructor call.
        """
        class_ref = jsast.member(jsast.member(jsast.ident('customModules'), module_path), class_name)
        slot_views_ref = jsast.member(jsast.member(class_ref, 'prototype'), '$slotViews')

        new_expression = jsast.ConditionalExpression(
            jsast.member(class_ref, 'isXMLComponent'),
            jsast.NewExpression(class_ref, [jsast.ident('moduleExports')]),
            jsast.NewExpression(class_ref, []),
        )
        return [
            jsast.assign(slot_views_ref, self.slotViews_ident(index)),
            *self.construction_build(index, new_expression, is_fallback),
            jsast.statement(jsast.UnaryExpression('delete', copy.deepcopy(slot_views_ref))),
        ]

    def slot_open(self, context: TagContext) -> None:
        element = self.element_ident(context.index)
        slot_name = context.attributes.get(SLOT_NAME_ATTRIBUTE) or DEFAULT_SLOT_NAME
        registry = jsast.member(jsast.ThisExpression(), '$slotViews')

        branch = jsast.IfStatement(
            jsast.member(registry, slot_name, optional=True),
            jsast.BlockStatement([
                jsast.assign(element, jsast.member(registry, slot_name)),
                jsast.statement(jsast.UnaryExpression('delete', jsast.member(registry, slot_name))),
            ]),
        )
        context.buffer.append(jsast.let(element.name), branch)
        context.splice_index = len(context.buffer)
        context.slot_branch = branch
        self.state.in_slot_fallback = True

    # ------------------------------------------------------------------
    # Tag closing

    @staticmethod
    def tag_isClosing(name: str, context: TagContext) -> bool:
        return context.full_name == name and not context.has_open_child_tag

    def tagClosing_handle(self, name: str) -> None:
        """
        Finish a tag: flush its output and pop its context.

        Args:
            name: Tag name as written in markup
        """
        state = self.state

        if self.platformTag_is(name):
            if not self.platform_matches(name):
                state.suppressed_platform_depth -= 1
            return
        if state.suppressed_platform_depth:
            return

        context = state.top
        if context is None:
            return
        if not self.tag_isClosing(name, context):
            context.has_open_child_tag = False
            return

        if not context.ignored:
            try:
                self.context_close(context)
            except CompilerError as error:
                self.channel.error_notify(error)

        state.stack.pop()
        parent = state.top
        if parent is not None:
            parent.has_open_child_tag = False
        elif not context.ignored:
            state.is_initialized = True
            LOG(f'Root view closed after {state.tree_index + 1} views', level=2)

    def context_close(self, context: TagContext) -> None:
        parent = self.parent_get()

        if context.kind is ElementKind.VIEW:
            if context.tag_name == SpecialTags.SLOT:
                self.slot_close(context)
            else:
                self.view_close(context)
        elif context.kind is ElementKind.COMMON_PROPERTY:
            self.commonProperty_close(context, parent)
        elif context.kind in (ElementKind.TEMPLATE, ElementKind.KEYED_TEMPLATE):
            last = context.child_indices[-1] if context.child_indices else None
            context.buffer.append(jsast.ReturnStatement(
                self.element_ident(last) if last is not None else jsast.NullLiteral()
            ))
        elif context.kind is None:
            self.slotContent_close(context, parent)

    def children_build(self, context: TagContext, indices: List[int]) -> List[jsast.Node]:
        """Child element references; slot children are spread as arrays"""
        children: List[jsast.Node] = []
        for index in indices:
            element = self.element_ident(index)
            if index in context.slot_child_indices:
                children.append(jsast.SpreadElement(
                    jsast.LogicalExpression('||', element, jsast.ArrayExpression()),
                ))
            else:
                children.append(element)
        return children

    def commonProperty_close(self, context: TagContext, parent: TagContext) -> None:
        children = self.children_build(context, context.child_indices)
        if children:
            arguments = [
                self.element_ident(context.index),
                jsast.ArrayExpression(children),
                jsast.string(context.property_name),
            ]
            if context.property_name in appsettings.known_collections:
                arguments.append(jsast.BooleanLiteral(True))
            context.buffer.append(jsast.statement(runtime_call('addViewsFromBuilder', *arguments)))

        parent.buffer.extend(context.buffer.statements)

    def slotContent_close(self, context: TagContext, parent: TagContext) -> None:
        slot_views = self.slotViews_ident(context.index)
        for slot_name, indices in context.slot_map.items():
            context.buffer.append(jsast.assign(
                jsast.member(slot_views, slot_name),
                jsast.ArrayExpression(self.children_build(context, indices)),
            ))

        # before the custom element is constructed
        parent.buffer.insert_at(parent.splice_index, context.buffer.statements)

    def slot_close(self, context: TagContext) -> None:
        self.state.in_slot_fallback = False

        buffer = context.buffer
        if len(buffer) <= context.splice_index:
            return
        if buffer.statements[context.splice_index - 1] is not context.slot_branch:
            raise StructuralError('Invalid slot syntax for slot fallback views')

        fallback = buffer.tail_take(context.splice_index)
        context.slot_branch.alternate = jsast.BlockStatement([
            jsast.let('fallbackViews', jsast.ArrayExpression()),
            *fallback,
            jsast.assign(self.element_ident(context.index), jsast.ident('fallbackViews')),
        ])

    def view_close(self, context: TagContext) -> None:
        if context.is_parent_for_slots and context.nested_tag_count > 1:
            raise StructuralError(
                f"Cannot mix common views or properties with slot content inside tag '{context.tag_name}'"
            )

        element = self.element_ident(context.index)
        children = self.children_build(context, context.child_indices)
        if children:
            context.buffer.append(jsast.statement(runtime_call(
                'addViewsFromBuilder', element, jsast.ArrayExpression(children),
            )))

        declarations, attach = self.callback_generator.callbacks_generate(
            context.index, element.name, context.descriptors,
        )
        self.state.callbacks.extend(declarations)
        context.buffer.extend(attach)

    # ------------------------------------------------------------------

    def document_finish(self) -> CompilerState:
        """
        Check the walk produced a component.

        Returns:
            The compiler state

        Raises:
            StructuralError: In strict mode, if no root view was built
        """
        if not self.state.is_initialized:
            self.channel.error_notify(StructuralError('Document does not contain a root view'))
        return self.state
