"""
Point-Cloud Render Session
==========================
One explicitly owned rendering context per active point-cloud file.

Why is this file needed?
------------------------
1. Ownership: The plotter (render window, camera, lights, interactor
   observers) belongs to exactly one session. Switching files disposes the
   old session before the next one is created, so GPU resources and
   observers never accumulate.
2. Staleness: Every session carries a generation id from a process-wide
   counter. Background loads capture the id they were issued for and are
   dropped when `SessionHost.is_live(generation)` no longer holds.

States:
    UNINITIALIZED -> READY -> DISPLAYING -> DISPOSED

The plotter is created by an injected factory. In the application that is a
`pyvistaqt.QtInteractor`; tests pass a recording fake.
"""
from __future__ import annotations

import itertools
import logging
from enum import StrEnum
from typing import Any, Callable, Optional, Sequence, TYPE_CHECKING, Union

import numpy as np
import pyvista as pv

from spatialview.config import (
    AMBIENT_INTENSITY,
    BACKGROUND_COLOR,
    CAMERA_CLIPPING_RANGE,
    CAMERA_VIEW_ANGLE,
    DEFAULT_POINT_SIZE,
    DIRECTIONAL_LIGHT_INTENSITY,
    DIRECTIONAL_LIGHT_POSITION,
)
from spatialview.model.geometry import CameraFrame

if TYPE_CHECKING:
    import numpy.typing as npt

logger = logging.getLogger(__name__)

PlotterFactory = Callable[[], Any]
ColorLike = Union[str, Sequence[float]]

POINT_ACTOR_NAME = "point-cloud"

# Interactor events the session listens to
_OBSERVED_EVENTS = ("EndInteractionEvent", "ConfigureEvent")

_generations = itertools.count(1)


def next_generation() -> int:
    return next(_generations)


class SessionState(StrEnum):
    UNINITIALIZED = "uninitialized"
    READY = "ready"
    DISPLAYING = "displaying"
    DISPOSED = "disposed"


class RenderSession:
    def __init__(
        self,
        plotter_factory: PlotterFactory,
        width: int = 0,
        height: int = 0,
        generation: Optional[int] = None
    ) -> None:
        self._factory = plotter_factory
        self.generation: int = generation if generation is not None else next_generation()
        self.state: SessionState = SessionState.UNINITIALIZED
        self.width = int(width)
        self.height = int(height)

        self.plotter: Any = None
        self._actor: Any = None
        self._frame: Optional[CameraFrame] = None
        self._observer_ids: list[int] = []

        self.point_size: float = DEFAULT_POINT_SIZE
        self.point_color: Optional[ColorLike] = None

    def __repr__(self) -> str:
        return f"RenderSession(generation={self.generation}, state={self.state.value})"

    # ------------------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------------------

    @property
    def is_disposed(self) -> bool:
        return self.state is SessionState.DISPOSED

    @property
    def has_points(self) -> bool:
        return self._actor is not None

    def initialize(self) -> None:
        """Create the plotter and set up camera, lights, controls and observers."""
        if self.state is not SessionState.UNINITIALIZED:
            logger.debug(f"{self!r}: initialize() ignored.")
            return

        self.plotter = self._factory()
        self.plotter.set_background(BACKGROUND_COLOR)

        camera = self.plotter.camera
        self.plotter.disable_parallel_projection()
        camera.view_angle = CAMERA_VIEW_ANGLE
        camera.clipping_range = CAMERA_CLIPPING_RANGE

        self.plotter.remove_all_lights()
        self.plotter.add_light(pv.Light(light_type="headlight", intensity=AMBIENT_INTENSITY))
        self.plotter.add_light(pv.Light(
            position=DIRECTIONAL_LIGHT_POSITION,
            focal_point=(0.0, 0.0, 0.0),
            light_type="scene light",
            intensity=DIRECTIONAL_LIGHT_INTENSITY,
        ))

        self.plotter.enable_trackball_style()
        self.plotter.add_axes()
        self._bind_listeners()

        self.state = SessionState.READY
        logger.debug(f"{self!r}: initialized ({self.width}x{self.height}).")
        self.plotter.render()

    def display(
        self,
        positions: npt.NDArray[np.float32],
        colors: npt.NDArray[np.float32],
        frame: CameraFrame
    ) -> bool:
        """
        Attach a point set, replacing the one shown before.

        Returns:
            False when the session is disposed (nothing happens), True otherwise.

        Raises:
            RuntimeError: If the session was never initialized.
        """
        if self.is_disposed:
            logger.debug(f"{self!r}: display() on disposed session ignored.")
            return False
        if self.state is SessionState.UNINITIALIZED:
            raise RuntimeError("RenderSession.display() called before initialize().")

        self._detach_points()

        cloud = pv.PolyData(np.asarray(positions, dtype=np.float32))
        cloud.point_data["rgb"] = np.asarray(colors, dtype=np.float32)
        self._actor = self.plotter.add_points(
            cloud,
            scalars="rgb",
            rgb=True,
            point_size=self.point_size,
            name=POINT_ACTOR_NAME,
            reset_camera=False,
        )
        if self.point_color is not None:
            self._apply_uniform_color()

        self._frame = frame
        self._apply_frame(frame)

        self.state = SessionState.DISPLAYING
        logger.debug(f"{self!r}: displaying {cloud.n_points} points.")
        self.plotter.render()
        return True

    def resize(self, width: int, height: int) -> None:
        """Record the host size, re-bind listeners and refresh the projection."""
        if self.is_disposed:
            return
        self.width = int(width)
        self.height = int(height)
        if self.plotter is None:
            return
        self._bind_listeners()
        self._update_projection()
        self.plotter.render()

    def dispose(self) -> None:
        """Detach listeners and release the plotter. Safe to call repeatedly."""
        if self.is_disposed:
            return
        if self.plotter is not None:
            self._unbind_listeners()
            self._detach_points()
            self.plotter.close()
        self.plotter = None
        self._frame = None
        self.state = SessionState.DISPOSED
        logger.debug(f"{self!r}: disposed.")

    # ------------------------------------------------------------------------------
    # Appearance
    # ------------------------------------------------------------------------------

    def set_point_size(self, size: float) -> None:
        self.point_size = float(size)
        if self._actor is not None and not self.is_disposed:
            self._actor.prop.point_size = self.point_size
            self.plotter.render()

    def set_point_color(self, color: Optional[ColorLike]) -> None:
        """Uniform color for every point; None restores per-point colors."""
        self.point_color = color
        if self._actor is None or self.is_disposed:
            return
        if color is None:
            self._actor.mapper.scalar_visibility = True
        else:
            self._apply_uniform_color()
        self.plotter.render()

    # ------------------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------------------

    def _apply_uniform_color(self) -> None:
        self._actor.mapper.scalar_visibility = False
        self._actor.prop.color = self.point_color

    def _detach_points(self) -> None:
        if self._actor is not None:
            self.plotter.remove_actor(self._actor, render=False)
            self._actor = None

    def _apply_frame(self, frame: CameraFrame) -> None:
        camera = self.plotter.camera
        camera.focal_point = frame.target
        camera.position = frame.position
        camera.up = (0.0, 1.0, 0.0)
        self._update_projection()

    def _update_projection(self) -> None:
        near, far = CAMERA_CLIPPING_RANGE
        if self._frame is not None:
            # keep the whole cloud inside the far plane
            far = max(far, self._frame.distance * 4.0)
        self.plotter.camera.clipping_range = (near, far)

    def _bind_listeners(self) -> None:
        self._unbind_listeners()
        iren = self.plotter.iren
        if iren is None:
            return
        for event in _OBSERVED_EVENTS:
            self._observer_ids.append(iren.add_observer(event, self._on_interactor_event))

    def _unbind_listeners(self) -> None:
        iren = self.plotter.iren if self.plotter is not None else None
        if iren is not None:
            for observer_id in self._observer_ids:
                iren.remove_observer(observer_id)
        self._observer_ids = []

    def _on_interactor_event(self, *_: Any) -> None:
        if self.is_disposed or self.plotter is None:
            return
        self._update_projection()

    @property
    def listener_count(self) -> int:
        return len(self._observer_ids)


class SessionHost:
    """
    Owns the single live RenderSession.

    `open()` disposes the current session before creating the next one, so at
    most one session holds a plotter at any time.
    """

    def __init__(
        self,
        plotter_factory: PlotterFactory,
        on_release: Optional[Callable[[RenderSession], None]] = None
    ) -> None:
        self._factory = plotter_factory
        self._on_release = on_release
        self.session: Optional[RenderSession] = None

    @property
    def generation(self) -> Optional[int]:
        return self.session.generation if self.session is not None else None

    def is_live(self, generation: int) -> bool:
        return (
            self.session is not None
            and not self.session.is_disposed
            and self.session.generation == generation
        )

    def open(self, width: int = 0, height: int = 0) -> RenderSession:
        self.close()
        session = RenderSession(self._factory, width, height)
        session.initialize()
        self.session = session
        logger.info(f"Opened render session {session.generation}.")
        return session

    def close(self) -> None:
        session, self.session = self.session, None
        if session is None:
            return
        session.dispose()
        if self._on_release is not None:
            self._on_release(session)
        logger.debug(f"Closed render session {session.generation}.")
