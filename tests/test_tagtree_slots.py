"""
Slot tests - <slot> placeholders and <slotContent> projection

Tests both sides of content projection:
- A component's <slot> takes views handed in through $slotViews, or
  builds its fallback views when none were given
- A custom element's <slotContent> groups child views by slot name and
  exposes them to the component while it is constructed
"""

import pytest

from xmlui.lib import document_compile
from xmlui.lib.errors import StructuralError
from xmlui.models import CompilerOptions


def compile_markup(markup, **options):
    return document_compile(markup, CompilerOptions(module_relative_path='card.xml', **options))


class TestSlot:
    """Test <slot> in a component"""

    MARKUP = '<StackLayout><slot name="header"><Label text="Fallback"/></slot><slot/></StackLayout>'

    def test_named_slot_with_fallback(self):
        code = compile_markup(self.MARKUP).module.code

        assert (
            "    let el1;\n"
            "    if (this.$slotViews?.header) {\n"
            "      el1 = this.$slotViews.header;\n"
            "      delete this.$slotViews.header;\n"
            "    } else {\n"
            "      let fallbackViews = [];\n"
            "      el1 = new Label();\n"
            "      fallbackViews.push(el1);\n"
            "      xmlRuntime.setPropertyValue(el1, 'text', 'Fallback');\n"
            "      el1 = fallbackViews;\n"
            "    }\n"
        ) in code

    def test_default_slot_without_fallback(self):
        code = compile_markup(self.MARKUP).module.code

        assert (
            "    let el2;\n"
            "    if (this.$slotViews?.default) {\n"
            "      el2 = this.$slotViews.default;\n"
            "      delete this.$slotViews.default;\n"
            "    }\n"
        ) in code

    def test_slots_spread_into_parent(self):
        code = compile_markup(self.MARKUP).module.code

        assert 'xmlRuntime.addViewsFromBuilder(el0, [...el1 || [], ...el2 || []]);' in code

    def test_slot_mixed_with_views(self):
        code = compile_markup('<StackLayout><Label/><slot/></StackLayout>').module.code

        assert 'xmlRuntime.addViewsFromBuilder(el0, [el1, ...el2 || []]);' in code

    def test_slot_name_not_an_identifier(self):
        code = compile_markup('<StackLayout><slot name="side-bar"/></StackLayout>').module.code

        assert "if (this.$slotViews?.['side-bar']) {" in code

    def test_slot_tag_not_imported(self):
        result = compile_markup(self.MARKUP)

        assert result.module.used_tags == {'Label', 'StackLayout'}

    def test_single_fallback_view(self):
        with pytest.raises(StructuralError, match="Tag 'slot' does not accept more than a single nested element"):
            compile_markup('<StackLayout><slot><Label/><Label/></slot></StackLayout>')

    def test_slot_inside_fallback(self):
        with pytest.raises(StructuralError, match='Cannot declare a slot inside slot fallback scope'):
            compile_markup('<StackLayout><slot><StackLayout><slot/></StackLayout></slot></StackLayout>')

    def test_fallback_scope_ends_with_slot(self):
        code = compile_markup('<StackLayout><slot><Label/></slot><slot/></StackLayout>').module.code

        assert 'let el2;' in code


class TestSlotContent:
    """Test <slotContent> inside custom elements"""

    MARKUP = (
        '<Page xmlns:c="~/components/card.xml">'
        '<c:Card><slotContent><Label slot="header" text="Title"/><Button/></slotContent></c:Card>'
        '</Page>'
    )
    CARD = "customModules['components/card.xml'].Card"

    def test_views_grouped_by_slot(self):
        code = compile_markup(self.MARKUP).module.code

        assert 'slotViews1.header = [el2];' in code
        assert 'slotViews1.default = [el3];' in code
        assert "'slot'" not in code

    def test_views_built_before_element(self):
        code = compile_markup(self.MARKUP).module.code

        declared = code.index('let slotViews1 = {};')
        label = code.index('let el2 = new Label();')
        assigned = code.index('slotViews1.default = [el3];')
        exposed = code.index(f'{self.CARD}.prototype.$slotViews = slotViews1;')
        constructed = code.index(f'let el1 = {self.CARD}.isXMLComponent')
        removed = code.index(f'delete {self.CARD}.prototype.$slotViews;')

        assert declared < label < assigned < exposed < constructed < removed

    def test_slot_content_views_not_children(self):
        code = compile_markup(self.MARKUP).module.code

        assert 'addViewsFromBuilder(el1' not in code
        assert 'xmlRuntime.addViewsFromBuilder(el0, [el1]);' in code

    def test_slot_content_needs_custom_parent(self):
        with pytest.raises(StructuralError, match='Can only nest slot content inside custom component tags'):
            compile_markup('<StackLayout><slotContent/></StackLayout>')

    def test_slot_content_needs_parent(self):
        with pytest.raises(StructuralError, match="Invalid tag 'slotContent'. Tag has no parent"):
            compile_markup('<slotContent/>')

    def test_single_slot_content(self):
        with pytest.raises(StructuralError, match='View already contains a slot content tag'):
            compile_markup('<Page xmlns:c="~/card"><c:Card><slotContent/><slotContent/></c:Card></Page>')

    def test_no_mixing_with_views(self):
        with pytest.raises(StructuralError, match="Cannot mix common views or properties with slot content inside tag 'c:Card'"):
            compile_markup('<Page xmlns:c="~/card"><c:Card><Label/><slotContent/></c:Card></Page>')

    def test_slot_content_inside_slot_fallback(self):
        with pytest.raises(StructuralError, match='Cannot nest slot content inside a slot'):
            compile_markup(
                '<StackLayout xmlns:c="~/card"><slot><c:Card><slotContent/></c:Card></slot></StackLayout>'
            )

    def test_custom_element_as_fallback(self):
        code = compile_markup('<StackLayout xmlns:c="~/card"><slot><c:Card/></slot></StackLayout>').module.code

        assert 'el1 = customModules.card.Card.isXMLComponent' in code
        assert 'fallbackViews.push(el1);' in code
