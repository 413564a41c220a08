"""Tests for the footprint model and its S-expression output."""

import math

import pytest
from sexpdata import loads, Symbol

from elibz2kicad.api.models import (
    FootprintLine, FootprintPolygon, FootprintCircle, KicadPadShape, PadType, Point
)
from elibz2kicad.config import ConverterConfig
from elibz2kicad.kicad.footprint_model import FootprintModel


def _find_all(tree, head):
    """Collect every sub-list of a parsed tree whose first element is head."""
    found = []
    if isinstance(tree, list):
        if tree and tree[0] == Symbol(head):
            found.append(tree)
        for item in tree:
            found.extend(_find_all(item, head))
    return found


@pytest.fixture
def model():
    return FootprintModel("TEST_FP")


class TestFootprintModel:

    def test_new_model_has_reference_and_value(self, model):
        texts = model.document.texts
        assert [t.kind for t in texts] == ["reference", "value"]
        assert texts[0].text == "REF**"
        assert texts[1].text == "TEST_FP"
        assert len(model.document.tedit) == 16
        assert model.graphics == []
        assert model.pads == []

    def test_circle_boundary_is_one_radius_from_center(self, model):
        circle = model.add_circle(Point(100, 50), 25, "F.SilkS", 6, False)
        assert isinstance(circle, FootprintCircle)
        distance = math.hypot(circle.end.x - circle.center.x, circle.end.y - circle.center.y)
        assert distance == pytest.approx(25)

    def test_unfilled_silkscreen_polygon_becomes_lines(self, model):
        """Front silkscreen outlines are written as one line per edge."""
        points = [Point(0, 0), Point(10, 0), Point(10, 10), Point(0, 10)]
        added = model.add_polygon(points, "F.SilkS", 6, False)
        assert len(added) == 3
        assert all(isinstance(g, FootprintLine) for g in model.graphics)
        assert model.graphics[0].start == points[0]
        assert model.graphics[-1].end == points[-1]

    @pytest.mark.parametrize("layer,fill", [
        ("F.SilkS", True),
        ("F.Fab", False),
        ("F.Cu", True),
    ])
    def test_other_polygons_stay_polygons(self, model, layer, fill):
        points = [Point(0, 0), Point(10, 0), Point(10, 10)]
        model.add_polygon(points, layer, 6, fill)
        assert len(model.graphics) == 1
        assert isinstance(model.graphics[0], FootprintPolygon)

    def test_arc_mid_is_computed(self, model):
        arc = model.add_arc(Point(10, 0), Point(0, 10), 90, "F.SilkS", 6)
        assert arc.mid.x == pytest.approx(10 * math.cos(math.pi / 4))
        assert arc.mid.y == pytest.approx(10 * math.sin(math.pi / 4))

    def test_every_primitive_gets_its_own_uuid(self, model):
        model.add_line(Point(0, 0), Point(1, 1), "F.Fab", 1)
        model.add_circle_hole(Point(0, 0), 5)
        model.add_pad_circle("1", Point(0, 0), 10, 2.0, 0.0)
        ids = [t.uuid for t in model.document.texts]
        ids += [g.uuid for g in model.graphics] + [p.uuid for p in model.pads]
        assert all(ids)
        assert len(set(ids)) == len(ids)

    def test_thru_hole_pad(self, model):
        pad = model.add_pad_hole("1", Point(0, 0), KicadPadShape.CIRCLE, 60, 60, 0, 30, 30)
        assert pad.pad_type == PadType.THRU_HOLE
        assert pad.drill_oval is False
        assert pad.layers == ["*.Cu", "*.Mask"]
        assert pad.mask_margin is None
        assert pad.mask_margin_mm == 0.051

    def test_thru_hole_mask_margin_is_written_in_mm(self):
        model = FootprintModel("TEST_FP", ConverterConfig(thru_hole_mask_margin=0.1))
        model.add_pad_hole("1", Point(0, 0), KicadPadShape.CIRCLE, 60, 60, 0, 30, 30)
        assert "(solder_mask_margin 0.1)" in model.serialize()

    def test_unequal_drill_is_oval(self, model):
        pad = model.add_pad_hole("1", Point(0, 0), KicadPadShape.RECT, 60, 60, 0, 20, 40)
        assert pad.drill_oval is True

    def test_custom_thru_hole_pad_rejected(self, model):
        with pytest.raises(ValueError):
            model.add_pad_hole("1", Point(0, 0), KicadPadShape.CUSTOM, 60, 60, 0, 30, 30)


class TestSerialization:

    def test_serialize_is_repeatable(self, model):
        model.add_line(Point(0, 0), Point(100, 0), "F.SilkS", 6)
        model.add_pad_rect("1", Point(0, 0), 0, 20, 30, 2.0, 0.0)
        assert model.serialize() == model.serialize()

    def test_output_parses_as_sexpr(self, model):
        model.add_line(Point(0, 0), Point(100, 0), "F.SilkS", 6)
        model.add_circle(Point(0, 0), 20, "F.Fab", 6, True)
        model.add_arc(Point(10, 0), Point(0, 10), 90, "F.SilkS", 6)
        model.add_polygon([Point(0, 0), Point(10, 0), Point(10, 10)], "F.Cu", 0, True)
        model.add_circle_hole(Point(50, 50), 10)
        model.add_pad_poly(
            "2", Point(100, 100),
            [Point(90, 90), Point(110, 90), Point(110, 110), Point(90, 110)],
            2.0, 0.0
        )

        tree = loads(model.serialize())
        assert tree[0] == Symbol("footprint")
        assert tree[1] == "TEST_FP"
        assert len(_find_all(tree, "fp_line")) == 1
        assert len(_find_all(tree, "fp_circle")) == 1
        assert len(_find_all(tree, "fp_arc")) == 1
        assert len(_find_all(tree, "fp_poly")) == 1
        assert len(_find_all(tree, "pad")) == 2
        assert len(_find_all(tree, "fp_text")) == 2

    def test_coordinates_are_scaled_and_flipped(self, model):
        model.add_line(Point(100, 100), Point(200, 100), "F.Fab", 10)
        content = model.serialize()
        assert "(start 2.54 -2.54)" in content
        assert "(end 5.08 -2.54)" in content
        assert "(width 0.254)" in content

    def test_graphics_come_before_pads(self, model):
        model.add_pad_circle("1", Point(0, 0), 10, 2.0, 0.0)
        model.add_line(Point(0, 0), Point(10, 0), "F.SilkS", 6)
        content = model.serialize()
        assert content.index("(fp_line") < content.index("(pad ")

    def test_smd_circle_pad(self, model):
        model.add_pad_circle("1", Point(0, 0), 10, 2.0, 0.0)
        content = model.serialize()
        assert '(pad "1" smd circle' in content
        assert "(size 0.254 0.254)" in content
        assert '(layers "F.Cu" "F.Paste" "F.Mask")' in content
        assert "(solder_mask_margin 0.0508)" in content
        assert "(solder_paste_margin 0)" in content

    def test_rotation_written_only_when_nonzero(self, model):
        model.add_pad_rect("1", Point(100, 0), 90, 20, 30, 2.0, 0.0)
        model.add_pad_rect("2", Point(-100, 0), 0, 20, 30, 2.0, 0.0)
        content = model.serialize()
        assert "(at 2.54 0 90)" in content
        assert "(at -2.54 0)" in content

    def test_custom_pad_outline_is_relative(self, model):
        model.add_pad_poly(
            "1", Point(100, 100),
            [Point(90, 90), Point(110, 90), Point(110, 110), Point(90, 110)],
            2.0, 0.0
        )
        content = model.serialize()
        assert '(pad "1" smd custom' in content
        assert "(size 0.0001 0.0001)" in content
        assert "(xy -0.254 0.254)" in content
        assert "(xy 0.254 -0.254)" in content
        assert "(anchor circle)" in content

    def test_thru_hole_pad_output(self, model):
        model.add_pad_hole("1", Point(0, 0), KicadPadShape.CIRCLE, 60, 60, 0, 30, 30)
        model.add_pad_hole("2", Point(100, 0), KicadPadShape.OVAL, 40, 60, 0, 20, 40)
        content = model.serialize()
        assert '(pad "1" thru_hole circle' in content
        assert "(drill 0.762)" in content
        assert '(pad "2" thru_hole oval' in content
        assert "(drill oval 0.508 1.016)" in content
        assert "(solder_mask_margin 0.051)" in content
        assert '(layers "*.Cu" "*.Mask")' in content

    def test_cutout_hole(self, model):
        model.add_circle_hole(Point(0, 0), 10)
        content = model.serialize()
        assert '(pad "" np_thru_hole circle' in content
        assert "(size 0.508 0.508)" in content
        assert "(drill 0.508)" in content

    def test_pads_only_document_is_well_formed(self, model):
        """A footprint with no graphics still has header, pads and footer."""
        model.add_pad_rect("1", Point(0, 0), 0, 20, 30, 2.0, 0.0)
        content = model.serialize()
        assert content.endswith(")\n")
        for head in ("fp_line", "fp_circle", "fp_arc", "fp_poly"):
            assert f"({head}" not in content
        tree = loads(content)
        assert len(_find_all(tree, "pad")) == 1
