"""Tests for spatialview.view.render_session - session lifecycle on a fake plotter."""
import numpy as np
import pytest

from spatialview.config import BACKGROUND_COLOR, CAMERA_CLIPPING_RANGE, CAMERA_VIEW_ANGLE
from spatialview.model.normalize import normalize
from spatialview.view.render_session import POINT_ACTOR_NAME, RenderSession, SessionHost, SessionState


def cloud(n=4, scale=1.0):
    positions = np.arange(n * 3, dtype=np.float32).reshape(n, 3) * scale
    colors = np.full((n, 3), 0.5, dtype=np.float32)
    return positions, colors, normalize(positions).frame


@pytest.fixture
def session(plotter_factory):
    s = RenderSession(plotter_factory, 640, 480)
    s.initialize()
    return s


class TestInitialize:
    def test_ready_with_camera_lights_and_controls(self, session, plotter_factory):
        plotter = plotter_factory.created[0]
        assert session.state is SessionState.READY
        assert plotter.background == BACKGROUND_COLOR
        assert plotter.parallel_projection is False
        assert plotter.camera.view_angle == CAMERA_VIEW_ANGLE
        assert plotter.camera.clipping_range == CAMERA_CLIPPING_RANGE
        assert len(plotter.lights) == 2
        assert plotter.style == "trackball"
        assert plotter.has_axes
        assert session.listener_count == 2
        assert len(plotter.iren.observers) == 2

    def test_initialize_twice_is_a_no_op(self, session, plotter_factory):
        session.initialize()
        assert len(plotter_factory.created) == 1

    def test_generations_increase(self, plotter_factory):
        first = RenderSession(plotter_factory)
        second = RenderSession(plotter_factory)
        assert second.generation > first.generation


class TestDisplay:
    def test_attaches_points_and_frames_camera(self, session, plotter_factory):
        positions, colors, frame = cloud()
        assert session.display(positions, colors, frame) is True
        plotter = plotter_factory.created[0]
        assert session.state is SessionState.DISPLAYING
        assert len(plotter.actors) == 1
        actor = plotter.actors[0]
        assert actor.kwargs["name"] == POINT_ACTOR_NAME
        assert actor.kwargs["rgb"] is True
        assert actor.mesh.n_points == 4
        assert plotter.camera.position == frame.position
        assert plotter.camera.focal_point == frame.target

    def test_replaces_previous_points(self, session, plotter_factory):
        session.display(*cloud(4))
        session.display(*cloud(7))
        actors = plotter_factory.created[0].actors
        assert len(actors) == 1
        assert actors[0].mesh.n_points == 7

    def test_far_plane_covers_large_clouds(self, session, plotter_factory):
        session.display(*cloud(4, scale=1000.0))
        near, far = plotter_factory.created[0].camera.clipping_range
        assert near == CAMERA_CLIPPING_RANGE[0]
        assert far > CAMERA_CLIPPING_RANGE[1]

    def test_before_initialize_raises(self, plotter_factory):
        with pytest.raises(RuntimeError):
            RenderSession(plotter_factory).display(*cloud())

    def test_after_dispose_is_ignored(self, session):
        session.dispose()
        assert session.display(*cloud()) is False
        assert session.state is SessionState.DISPOSED


class TestListeners:
    def test_resize_does_not_accumulate_observers(self, session, plotter_factory):
        for size in range(10):
            session.resize(100 + size, 100)
        assert session.listener_count == 2
        assert len(plotter_factory.created[0].iren.observers) == 2
        assert (session.width, session.height) == (109, 100)

    def test_interaction_refreshes_projection(self, session, plotter_factory):
        plotter = plotter_factory.created[0]
        session.display(*cloud(4, scale=1000.0))
        plotter.camera.clipping_range = (1.0, 2.0)
        plotter.iren.fire("EndInteractionEvent")
        assert plotter.camera.clipping_range[1] > CAMERA_CLIPPING_RANGE[1]


class TestDispose:
    def test_releases_plotter_and_observers(self, session, plotter_factory):
        session.display(*cloud())
        session.dispose()
        plotter = plotter_factory.created[0]
        assert plotter.closed
        assert plotter.actors == []
        assert plotter.iren.observers == {}
        assert session.plotter is None
        assert session.listener_count == 0

    def test_idempotent(self, session):
        session.dispose()
        session.dispose()
        assert session.is_disposed

    def test_later_calls_are_no_ops(self, session):
        session.dispose()
        session.resize(10, 10)
        session.set_point_size(5)
        session.set_point_color("red")
        assert session.is_disposed


class TestAppearance:
    def test_point_size(self, session, plotter_factory):
        session.display(*cloud())
        session.set_point_size(6)
        assert plotter_factory.created[0].actors[0].prop.point_size == 6.0

    def test_uniform_color_and_restore(self, session, plotter_factory):
        session.display(*cloud())
        actor = plotter_factory.created[0].actors[0]
        session.set_point_color("#ff0000")
        assert actor.prop.color == "#ff0000"
        assert actor.mapper.scalar_visibility is False
        session.set_point_color(None)
        assert actor.mapper.scalar_visibility is True

    def test_color_set_before_display_is_applied(self, session, plotter_factory):
        session.set_point_color("white")
        session.display(*cloud())
        assert plotter_factory.created[0].actors[0].prop.color == "white"


class TestSessionHost:
    def test_open_disposes_previous(self, plotter_factory):
        host = SessionHost(plotter_factory)
        first = host.open()
        second = host.open()
        assert first.is_disposed
        assert plotter_factory.created[0].closed
        assert host.session is second
        assert second.state is SessionState.READY

    def test_is_live(self, plotter_factory):
        host = SessionHost(plotter_factory)
        first = host.open()
        assert host.is_live(first.generation)
        second = host.open()
        assert not host.is_live(first.generation)
        assert host.is_live(second.generation)
        host.close()
        assert not host.is_live(second.generation)
        assert host.generation is None

    def test_on_release(self, plotter_factory):
        released = []
        host = SessionHost(plotter_factory, on_release=released.append)
        session = host.open()
        host.close()
        host.close()
        assert released == [session]

    def test_at_most_one_open_plotter(self, plotter_factory):
        host = SessionHost(plotter_factory)
        for _ in range(5):
            host.open()
        assert sum(not p.closed for p in plotter_factory.created) == 1
