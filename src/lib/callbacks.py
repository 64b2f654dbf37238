"""
Binding callback generation

For every view with at least one binding, generates module-level functions
keyed by the view's tree index N:

updateBindingsN(view, bindingContext, propertyName = null)
    Evaluates forward expressions against the complete binding source and
    applies them. With a propertyName, only bindings depending on that
    property run; bindings currently being written back by the view are
    skipped to suppress an immediate echo.

onBindingContextChangeN(args)
    Detaches listeners from the old context. With no new context, unsets the
    applied values. Otherwise applies every binding and attaches one source
    listener per distinct dependency property.

onBindingTargetChangeN_I(args)
    One per two-way binding I. Writes the view's new value back to the
    binding context through the owner's set() method when it has one,
    else by plain assignment. Guarded against re-entry.

The construction code only needs the returned attach statements, which
subscribe these handlers on the view.
"""

import copy
from typing import List, Tuple

from . import jsast
from .binding import (
    PARENT_REFERENCE_NAME,
    PARENTS_REFERENCE_NAME,
    VALUE_REFERENCE_NAME,
    VIEW_MODEL_REFERENCE_NAME,
    runtime_member,
)
from .log import LOG
from ..models.binding import BindingDescriptor


BINDING_CONTEXT_CHANGE_EVENT = 'bindingContextChange'
TARGET_CHANGE_EVENT_SUFFIX = 'Change'

UPDATING_FLAG = '_isBindingTargetUpdating'
TARGET_PROPERTY_FLAG = '_bindingTargetPropertyName'


def runtime_call(method: str, *args: jsast.Node) -> jsast.CallExpression:
    return jsast.call(runtime_member(method), *args)


def propertyPath_split(owner: jsast.Node, property_name: str) -> Tuple[jsast.Node, str]:
    """
    Walk a dotted property path down to its last segment.

    Example:
        'style.color' on view -> (view.style, 'color')
        'a.b.c' on view      -> (view.a?.b, 'c')
    """
    segments = property_name.split('.')
    for position, segment in enumerate(segments[:-1]):
        owner = jsast.member(owner, segment, optional=position > 0)
    return owner, segments[-1]


def target_split(target: jsast.Node) -> Tuple[jsast.Node, jsast.Node, bool]:
    """
    Split a settable reference into (owner, key, computed).

    viewModel.user?.name -> (viewModel.user, 'name', False)
    viewModel.items?.[0] -> (viewModel.items, 0, True)
    """
    owner = target.object
    if target.computed:
        return owner, target.property, True
    return owner, jsast.string(target.property.name), False


class BindingCallbackGenerator:
    """
    Generate binding callbacks for one view.

    Example:
        >>> generator = BindingCallbackGenerator()
        >>> declarations, attach = generator.callbacks_generate(1, 'el1', descriptors)
    """

    @staticmethod
    def updateName_make(index: int) -> str:
        return f'updateBindings{index}'

    @staticmethod
    def contextChangeName_make(index: int) -> str:
        return f'onBindingContextChange{index}'

    @staticmethod
    def targetChangeName_make(index: int, position: int) -> str:
        return f'onBindingTargetChange{index}_{position}'

    @staticmethod
    def scope_declare(view: jsast.Node, descriptors: List[BindingDescriptor]) -> List[jsast.Node]:
        """Declare $value/$parent/$parents when any binding refers to them"""
        if not any(descriptor.special_reference_count for descriptor in descriptors):
            return []

        parent_context = jsast.member(jsast.member(view, 'parent'), 'bindingContext', optional=True)
        statements: List[jsast.Node] = [
            jsast.let(VALUE_REFERENCE_NAME, jsast.ident(VIEW_MODEL_REFERENCE_NAME)),
            jsast.let(PARENT_REFERENCE_NAME, parent_context),
        ]

        keys = [
            key for descriptor in descriptors for key in descriptor.parent_key_expressions
        ]
        if keys:
            statements.append(jsast.let(
                PARENTS_REFERENCE_NAME,
                runtime_call('createParentsBindingInstance', view, jsast.ArrayExpression(keys)),
            ))
        return statements

    @staticmethod
    def apply_build(view: jsast.Node, descriptor: BindingDescriptor, value: jsast.Node) -> jsast.Node:
        """Statement applying value to the descriptor's target"""
        if descriptor.is_event_listener:
            return jsast.statement(runtime_call(
                'setEventListener', view, jsast.string(descriptor.property_name), value,
            ))

        if descriptor.is_sub_property:
            owner, name = propertyPath_split(view, descriptor.property_name)
            return jsast.statement(jsast.LogicalExpression(
                '&&', owner, runtime_call('setPropertyValue', owner, jsast.string(name), value),
            ))

        return jsast.statement(runtime_call(
            'setPropertyValue', view, jsast.string(descriptor.property_name), value,
        ))

    @staticmethod
    def guard_build(descriptor: BindingDescriptor) -> jsast.Node:
        """(propertyName == null || propertyName === 'a' || ...) [&& not echoing]"""
        property_name = jsast.ident('propertyName')
        test: jsast.Node = jsast.BinaryExpression('==', property_name, jsast.NullLiteral())
        for dependency in descriptor.properties:
            test = jsast.LogicalExpression(
                '||', test, jsast.BinaryExpression('===', property_name, jsast.string(dependency)),
            )

        if descriptor.is_two_way:
            test = jsast.LogicalExpression('&&', test, jsast.BinaryExpression(
                '!==',
                jsast.member(jsast.ident('view'), TARGET_PROPERTY_FLAG),
                jsast.string(descriptor.property_name),
            ))
        return test

    def update_build(self, index: int, descriptors: List[BindingDescriptor]) -> jsast.FunctionDeclaration:
        view = jsast.ident('view')
        body: List[jsast.Node] = self.scope_declare(view, descriptors)

        for descriptor in descriptors:
            body.append(jsast.IfStatement(
                self.guard_build(descriptor),
                jsast.BlockStatement([self.apply_build(view, descriptor, descriptor.expression)]),
            ))

        source_callback = jsast.ArrowFunctionExpression(
            [jsast.ident(VIEW_MODEL_REFERENCE_NAME)], jsast.BlockStatement(body),
        )
        return jsast.FunctionDeclaration(
            jsast.ident(self.updateName_make(index)),
            [
                view,
                jsast.ident('bindingContext'),
                jsast.AssignmentPattern(jsast.ident('propertyName'), jsast.NullLiteral()),
            ],
            jsast.BlockStatement([jsast.statement(runtime_call(
                'getCompleteBindingSource', jsast.ident('bindingContext'), source_callback,
            ))]),
        )

    def contextChange_build(self, index: int, descriptors: List[BindingDescriptor]) -> jsast.FunctionDeclaration:
        """
        onBindingContextChangeN(args): detach from the old context, then
        unset every bound value when the new one is null, or apply the
        bindings and listen to each dependency of the new one.

        Only a null context detaches. Primitive contexts (string list items
        bound through $value) are valid; whether a context can serve as a
        binding source at all is decided at runtime by
        xmlRuntime.getCompleteBindingSource, which every update goes through.
        """
        view = jsast.ident('view')
        args = jsast.ident('args')
        old_value = jsast.member(args, 'oldValue')
        new_value = jsast.member(args, 'value')

        unset = [
            self.apply_build(view, descriptor, jsast.NullLiteral() if descriptor.is_event_listener else jsast.ident('undefined'))
            for descriptor in descriptors
        ]
        unset.append(jsast.ReturnStatement())

        properties: List[str] = []
        for descriptor in descriptors:
            for dependency in descriptor.properties:
                if dependency not in properties:
                    properties.append(dependency)

        body: List[jsast.Node] = [
            jsast.let('view', jsast.member(args, 'object')),
            jsast.IfStatement(
                jsast.BinaryExpression('!=', old_value, jsast.NullLiteral()),
                jsast.BlockStatement([jsast.statement(runtime_call('removeBindingSourceListeners', view, old_value))]),
            ),
            jsast.IfStatement(
                jsast.BinaryExpression('==', new_value, jsast.NullLiteral()),
                jsast.BlockStatement(unset),
            ),
            jsast.statement(jsast.call(jsast.ident(self.updateName_make(index)), view, new_value)),
        ]
        for dependency in properties:
            body.append(jsast.statement(runtime_call(
                'addBindingSourceListener', view, new_value, jsast.string(dependency),
                jsast.ident(self.updateName_make(index)),
            )))

        return jsast.FunctionDeclaration(
            jsast.ident(self.contextChangeName_make(index)), [args], jsast.BlockStatement(body),
        )

    def targetChange_build(
        self, index: int, position: int, descriptor: BindingDescriptor
    ) -> jsast.FunctionDeclaration:
        view = jsast.ident('view')
        args = jsast.ident('args')
        updating = jsast.member(view, UPDATING_FLAG)
        target_property = jsast.member(view, TARGET_PROPERTY_FLAG)

        if descriptor.to_model is not None:
            target, value = descriptor.to_model
        else:
            target, value = descriptor.expression, jsast.ident('value')

        owner_expression, key, computed = target_split(copy.deepcopy(target))
        owner = jsast.ident('owner')
        setter = jsast.member(owner, 'set')
        assignment_target = jsast.MemberExpression(
            owner, key if computed else jsast.ident(key.value), computed=computed,
        )

        write_back: List[jsast.Node] = self.scope_declare(view, [descriptor]) + [
            jsast.let('value', jsast.member(args, 'value')),
            jsast.let('owner', owner_expression),
            jsast.IfStatement(
                jsast.BinaryExpression('!=', owner, jsast.NullLiteral()),
                jsast.BlockStatement([jsast.IfStatement(
                    jsast.BinaryExpression('===', jsast.UnaryExpression('typeof', setter), jsast.string('function')),
                    jsast.BlockStatement([jsast.statement(jsast.call(setter, copy.deepcopy(key), value))]),
                    jsast.BlockStatement([jsast.assign(assignment_target, copy.deepcopy(value))]),
                )]),
            ),
        ]

        body: List[jsast.Node] = [
            jsast.let('view', jsast.member(args, 'object')),
            jsast.IfStatement(updating, jsast.BlockStatement([jsast.ReturnStatement()])),
            jsast.assign(updating, jsast.BooleanLiteral(True)),
            jsast.assign(target_property, jsast.string(descriptor.property_name)),
            jsast.TryStatement(
                jsast.BlockStatement([jsast.statement(runtime_call(
                    'getCompleteBindingSource',
                    jsast.member(view, 'bindingContext'),
                    jsast.ArrowFunctionExpression(
                        [jsast.ident(VIEW_MODEL_REFERENCE_NAME)], jsast.BlockStatement(write_back),
                    ),
                ))]),
                jsast.BlockStatement([
                    jsast.assign(updating, jsast.BooleanLiteral(False)),
                    jsast.assign(target_property, jsast.NullLiteral()),
                ]),
            ),
        ]
        return jsast.FunctionDeclaration(
            jsast.ident(self.targetChangeName_make(index, position)), [args], jsast.BlockStatement(body),
        )

    def callbacks_generate(
        self, index: int, element_name: str, descriptors: List[BindingDescriptor]
    ) -> Tuple[List[jsast.Node], List[jsast.Node]]:
        """
        Generate the callbacks of one view.

        Args:
            index: Tree index of the view
            element_name: Variable holding the view in construction code
            descriptors: The view's bindings, in attribute order

        Returns:
            (function declarations for module scope,
             statements subscribing them on the view)
        """
        if not descriptors:
            return [], []

        element = jsast.ident(element_name)
        declarations: List[jsast.Node] = [
            self.update_build(index, descriptors),
            self.contextChange_build(index, descriptors),
        ]
        attach: List[jsast.Node] = [jsast.statement(runtime_call(
            'addEventListener', element, jsast.string(BINDING_CONTEXT_CHANGE_EVENT),
            jsast.ident(self.contextChangeName_make(index)),
        ))]

        two_way = [descriptor for descriptor in descriptors if descriptor.is_two_way]
        for position, descriptor in enumerate(two_way):
            declarations.append(self.targetChange_build(index, position, descriptor))
            attach.append(jsast.statement(runtime_call(
                'addEventListener', element,
                jsast.string(descriptor.property_name + TARGET_CHANGE_EVENT_SUFFIX),
                jsast.ident(self.targetChangeName_make(index, position)),
            )))

        LOG(f'Generated {len(declarations)} binding callbacks for {element_name}', level=3)
        return declarations, attach

