"""
Binding callback tests - generated update/context/target handlers

Tests the functions emitted for a view with bindings:
- updateBindingsN applies forward expressions, filtered by property name
- onBindingContextChangeN swaps source listeners and unsets on null context
- onBindingTargetChangeN_I writes two-way values back to the context
- The attach statements subscribe the handlers on the view
"""

from xmlui.lib import jsast
from xmlui.lib.binding import BindingExpressionCompiler
from xmlui.lib.callbacks import (
    BindingCallbackGenerator,
    propertyPath_split,
    target_split,
)
from xmlui.lib.codegen import code_generate
from xmlui.models import AttributeItem


def descriptor_make(value, name='text', prefix=None):
    local = name.split(':')[-1]
    is_event_listener = prefix == 'on'
    item = AttributeItem(
        name=name,
        property_name=local,
        prefix=prefix,
        value=value,
        is_event_listener=is_event_listener,
        is_sub_property=not is_event_listener and '.' in local,
        is_binding=True,
    )
    return BindingExpressionCompiler().descriptor_build(item)


def generate(index, *descriptors):
    declarations, attach = BindingCallbackGenerator().callbacks_generate(
        index, f'el{index}', list(descriptors),
    )
    return [code_generate(node) for node in declarations], [code_generate(node) for node in attach]


class TestNames:
    """Test generated function names"""

    def test_names(self):
        generator = BindingCallbackGenerator()

        assert generator.updateName_make(3) == 'updateBindings3'
        assert generator.contextChangeName_make(3) == 'onBindingContextChange3'
        assert generator.targetChangeName_make(3, 1) == 'onBindingTargetChange3_1'


class TestHelpers:
    """Test property path and target splitting"""

    def test_property_path_single_level(self):
        owner, name = propertyPath_split(jsast.ident('view'), 'style.color')

        assert code_generate(owner) == 'view.style'
        assert name == 'color'

    def test_property_path_deep_is_null_safe(self):
        owner, name = propertyPath_split(jsast.ident('view'), 'a.b.c')

        assert code_generate(owner) == 'view.a?.b'
        assert name == 'c'

    def test_target_split_named(self):
        target = descriptor_make('{{ user.name }}').expression
        owner, key, computed = target_split(target)

        assert code_generate(owner) == 'viewModel.user'
        assert key.value == 'name'
        assert computed is False

    def test_target_split_computed(self):
        target = descriptor_make('{{ items[0] }}').expression
        owner, key, computed = target_split(target)

        assert code_generate(owner) == 'viewModel.items'
        assert code_generate(key) == '0'
        assert computed is True


class TestNoBindings:
    """Test views without bindings"""

    def test_nothing_generated(self):
        assert BindingCallbackGenerator().callbacks_generate(0, 'el0', []) == ([], [])


class TestTwoWayBinding:
    """Test the full callback set of <TextField text="{{ username }}"/>"""

    def test_update_function(self):
        declarations, _ = generate(1, descriptor_make('{{ username }}'))

        assert declarations[0] == (
            "function updateBindings1(view, bindingContext, propertyName = null) {\n"
            "  xmlRuntime.getCompleteBindingSource(bindingContext, viewModel => {\n"
            "    if ((propertyName == null || propertyName === 'username')"
            " && view._bindingTargetPropertyName !== 'text') {\n"
            "      xmlRuntime.setPropertyValue(view, 'text', viewModel.username);\n"
            "    }\n"
            "  });\n"
            "}"
        )

    def test_context_change_function(self):
        declarations, _ = generate(1, descriptor_make('{{ username }}'))

        assert declarations[1] == (
            "function onBindingContextChange1(args) {\n"
            "  let view = args.object;\n"
            "  if (args.oldValue != null) {\n"
            "    xmlRuntime.removeBindingSourceListeners(view, args.oldValue);\n"
            "  }\n"
            "  if (args.value == null) {\n"
            "    xmlRuntime.setPropertyValue(view, 'text', undefined);\n"
            "    return;\n"
            "  }\n"
            "  updateBindings1(view, args.value);\n"
            "  xmlRuntime.addBindingSourceListener(view, args.value, 'username', updateBindings1);\n"
            "}"
        )

    def test_target_change_function(self):
        declarations, _ = generate(1, descriptor_make('{{ username }}'))

        assert declarations[2] == (
            "function onBindingTargetChange1_0(args) {\n"
            "  let view = args.object;\n"
            "  if (view._isBindingTargetUpdating) {\n"
            "    return;\n"
            "  }\n"
            "  view._isBindingTargetUpdating = true;\n"
            "  view._bindingTargetPropertyName = 'text';\n"
            "  try {\n"
            "    xmlRuntime.getCompleteBindingSource(view.bindingContext, viewModel => {\n"
            "      let value = args.value;\n"
            "      let owner = viewModel;\n"
            "      if (owner != null) {\n"
            "        if (typeof owner.set === 'function') {\n"
            "          owner.set('username', value);\n"
            "        } else {\n"
            "          owner.username = value;\n"
            "        }\n"
            "      }\n"
            "    });\n"
            "  } finally {\n"
            "    view._isBindingTargetUpdating = false;\n"
            "    view._bindingTargetPropertyName = null;\n"
            "  }\n"
            "}"
        )

    def test_attach_statements(self):
        _, attach = generate(1, descriptor_make('{{ username }}'))

        assert attach == [
            "xmlRuntime.addEventListener(el1, 'bindingContextChange', onBindingContextChange1);",
            "xmlRuntime.addEventListener(el1, 'textChange', onBindingTargetChange1_0);",
        ]


class TestOneWayBindings:
    """Test bindings without write-back"""

    def test_no_target_change_handler(self):
        declarations, attach = generate(2, descriptor_make('{{ first + last }}'))

        assert len(declarations) == 2
        assert len(attach) == 1

    def test_guard_lists_every_dependency(self):
        declarations, _ = generate(2, descriptor_make('{{ first + last }}'))

        assert (
            "if (propertyName == null || propertyName === 'first' || propertyName === 'last') {"
            in declarations[0]
        )

    def test_listener_per_distinct_property(self):
        declarations, _ = generate(
            2,
            descriptor_make('{{ first + last }}'),
            descriptor_make('{{ last }}', name='hint'),
        )

        assert declarations[1].count('addBindingSourceListener') == 2

    def test_event_binding_unset_with_null(self):
        declarations, _ = generate(0, descriptor_make('{{ onTap }}', name='on:tap', prefix='on'))

        assert "xmlRuntime.setEventListener(view, 'tap', viewModel.onTap);" in declarations[0]
        assert "xmlRuntime.setEventListener(view, 'tap', null);" in declarations[1]

    def test_sub_property_guarded_by_owner(self):
        declarations, _ = generate(0, descriptor_make('{{ color }}', name='style.color'))

        assert (
            "view.style && xmlRuntime.setPropertyValue(view.style, 'color', viewModel.color);"
            in declarations[0]
        )


class TestConverterWriteBack:
    """Test two-way bindings through converters"""

    def test_reverse_converter_applied(self):
        declarations, _ = generate(1, descriptor_make('{{ user.price | currency }}'))
        target_change = declarations[2]

        assert 'let owner = viewModel.user;' in target_change
        assert (
            "owner.set('price', xmlRuntime.runConverterCallback(viewModel.currency, [value], true));"
            in target_change
        )
        assert (
            'owner.price = xmlRuntime.runConverterCallback(viewModel.currency, [value], true);'
            in target_change
        )


class TestSpecialScope:
    """Test $value/$parent/$parents declarations"""

    def test_value_and_parent_declared(self):
        declarations, _ = generate(1, descriptor_make('{{ $value }}'))

        assert 'let $value = viewModel;' in declarations[0]
        assert 'let $parent = view.parent?.bindingContext;' in declarations[0]
        assert '$parents' not in declarations[0]

    def test_parents_instance_created(self):
        declarations, _ = generate(1, descriptor_make("{{ $parents['ListView'].title }}"))

        assert (
            "let $parents = xmlRuntime.createParentsBindingInstance(view, ['ListView']);"
            in declarations[0]
        )

    def test_no_scope_without_special_references(self):
        declarations, _ = generate(1, descriptor_make('{{ title }}'))

        assert '$value' not in declarations[0]

    def test_primitive_context_not_detached(self):
        declarations, _ = generate(1, descriptor_make('{{ $value }}'))

        assert 'if (args.value == null) {' in declarations[1]
        assert 'typeof' not in declarations[1]
        assert 'xmlRuntime.getCompleteBindingSource(bindingContext, viewModel => {' in declarations[0]
