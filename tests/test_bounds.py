from common.bounds import Bounds


class TestClass:
    def test_bounds_fields(self):
        bounds = Bounds(40, 30, 640, 480)
        assert bounds.left == 40 and bounds.top == 30 and bounds.width == 640 and bounds.height == 480

    def test_bounds_area(self):
        assert Bounds(40, 30, 640, 480).area() == 307200

    def test_bounds_center(self):
        assert Bounds(100, 50, 200, 100).center() == (200, 100)

    def test_document_inside_frame(self):
        frame = Bounds(0, 0, 800, 600)
        document = Bounds(160, 120, 480, 360)
        assert document.isInside(frame)
        assert not frame.isInside(document)

    def test_document_touching_frame_edge(self):
        assert Bounds(0, 0, 800, 600).isInside(Bounds(0, 0, 800, 600))

    def test_document_overhanging_frame(self):
        frame = Bounds(0, 0, 800, 600)
        document = Bounds(500, 400, 400, 300)
        assert not document.isInside(frame)
        # centre (700, 550) is still on screen
        assert document.isInside(frame, True)

    def test_document_mostly_off_frame(self):
        frame = Bounds(0, 0, 800, 600)
        document = Bounds(700, 500, 400, 300)
        assert not document.isInside(frame, True)

    def test_from_points(self):
        bounds = Bounds.from_points([(10, 20), (30, 5), (25, 40)])
        assert bounds == Bounds(10, 5, 20, 35)

    def test_clamp(self):
        bounds = Bounds(-5, -5, 20, 20).clamp(10, 10)
        assert bounds == Bounds(0, 0, 10, 10)

    def test_clamp_without_overlap(self):
        bounds = Bounds(20, 20, 5, 5).clamp(10, 10)
        assert bounds.area() == 0

    def test_to_dict(self):
        assert Bounds(1, 2, 3, 4).to_dict() == {"x": 1.0, "y": 2.0, "width": 3.0, "height": 4.0}
