"""
Display Module
==============
Pygame window for the viewer.

Features:
- Resizable window with a frame clock (one tick per refresh)
- Translation of pygame events into logical viewer events
- Browser-style key names ("w", "arrowup", "shift")
- Blitting of OpenCV (BGR numpy) frames
"""

import logging
from dataclasses import dataclass
from typing import List, Optional, Tuple

import numpy as np
import pygame

logger = logging.getLogger(__name__)


# pygame key names that differ from the logical names the controller uses
KEY_ALIASES = {
    'up': 'arrowup',
    'down': 'arrowdown',
    'left': 'arrowleft',
    'right': 'arrowright',
    'left shift': 'shift',
    'right shift': 'shift',
    'left ctrl': 'control',
    'right ctrl': 'control',
}

# Pixels of scroll per wheel notch, matching typical browser deltaY
WHEEL_DELTA_PER_NOTCH = 100.0


@dataclass
class ViewerEvent:
    """
    Logical input event.

    kind is one of: 'quit', 'key_down', 'key_up', 'pointer_down',
    'pointer_move', 'pointer_up', 'pointer_leave', 'wheel', 'resize', 'blur'.
    """
    kind: str
    key: Optional[str] = None
    x: float = 0.0
    y: float = 0.0
    delta_y: float = 0.0
    size: Optional[Tuple[int, int]] = None


def logical_key_name(pygame_name: str) -> str:
    name = pygame_name.lower()
    return KEY_ALIASES.get(name, name)


class ViewerDisplay:
    """
    Pygame-based display for the viewer.

    Args:
        width: Window width
        height: Window height
        title: Window title
        target_fps: Frame cap (0 = uncapped)
    """

    def __init__(self, width: int = 800, height: int = 600,
                 title: str = "Orbit Viewer", target_fps: int = 60):
        pygame.init()
        pygame.display.set_caption(title)

        self.width = width
        self.height = height
        self.title = title
        self.target_fps = target_fps
        self._running = True

        self.screen = pygame.display.set_mode(
            (width, height),
            pygame.HWSURFACE | pygame.DOUBLEBUF | pygame.RESIZABLE
        )
        self.clock = pygame.time.Clock()
        logger.debug("Display created %dx%d", width, height)

    def process_events(self) -> List[ViewerEvent]:
        """Drain the pygame queue into logical events, in arrival order."""
        events = []

        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                self._running = False
                events.append(ViewerEvent('quit'))

            elif event.type == pygame.KEYDOWN:
                events.append(ViewerEvent('key_down', key=logical_key_name(pygame.key.name(event.key))))

            elif event.type == pygame.KEYUP:
                events.append(ViewerEvent('key_up', key=logical_key_name(pygame.key.name(event.key))))

            elif event.type == pygame.MOUSEBUTTONDOWN and event.button == 1:
                events.append(ViewerEvent('pointer_down', x=event.pos[0], y=event.pos[1]))

            elif event.type == pygame.MOUSEBUTTONUP and event.button == 1:
                events.append(ViewerEvent('pointer_up', x=event.pos[0], y=event.pos[1]))

            elif event.type == pygame.MOUSEMOTION:
                events.append(ViewerEvent('pointer_move', x=event.pos[0], y=event.pos[1]))

            elif event.type == pygame.MOUSEWHEEL:
                # pygame: positive y scrolls up; browsers report that as negative deltaY
                events.append(ViewerEvent('wheel', delta_y=-event.y * WHEEL_DELTA_PER_NOTCH))

            elif event.type == pygame.WINDOWLEAVE:
                events.append(ViewerEvent('pointer_leave'))

            elif event.type == pygame.WINDOWFOCUSLOST:
                events.append(ViewerEvent('blur'))

            elif event.type == pygame.VIDEORESIZE:
                self.width = event.w
                self.height = event.h
                events.append(ViewerEvent('resize', size=(event.w, event.h)))

        return events

    def show_frame(self, frame: np.ndarray):
        """
        Display an OpenCV frame (BGR numpy array) and wait for the next tick.

        The frame is scaled to the window if sizes differ.
        """
        frame_rgb = frame[:, :, ::-1]
        surface = pygame.surfarray.make_surface(frame_rgb.swapaxes(0, 1))

        if surface.get_width() != self.width or surface.get_height() != self.height:
            surface = pygame.transform.scale(surface, (self.width, self.height))

        self.screen.blit(surface, (0, 0))
        pygame.display.flip()

        if self.target_fps > 0:
            self.clock.tick(self.target_fps)
        else:
            self.clock.tick()

    @property
    def running(self) -> bool:
        return self._running

    def close(self):
        """Close the display and clean up pygame."""
        self._running = False
        pygame.quit()
