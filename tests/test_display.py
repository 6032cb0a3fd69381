"""Tests for the pygame display, run on the SDL dummy video driver."""

import numpy as np
import pygame
import pytest

from core.display import ViewerDisplay, logical_key_name


@pytest.fixture
def display(monkeypatch):
    monkeypatch.setenv("SDL_VIDEODRIVER", "dummy")
    d = ViewerDisplay(320, 240, target_fps=0)
    yield d
    d.close()


class TestLogicalKeyName:
    @pytest.mark.parametrize("pygame_name,expected", [
        ("w", "w"),
        ("up", "arrowup"),
        ("left", "arrowleft"),
        ("left shift", "shift"),
        ("right shift", "shift"),
        ("Q", "q"),
    ])
    def test_aliases(self, pygame_name, expected):
        assert logical_key_name(pygame_name) == expected


class TestViewerDisplay:
    def test_resize_event_updates_window_size(self, display):
        display.process_events()
        pygame.event.post(pygame.event.Event(pygame.VIDEORESIZE, w=640, h=480, size=(640, 480)))
        events = [e for e in display.process_events() if e.kind == 'resize']
        assert events[-1].size == (640, 480)
        assert (display.width, display.height) == (640, 480)

    def test_show_frame_scales_to_window(self, display):
        display.show_frame(np.zeros((100, 200, 3), dtype=np.uint8))
        assert display.running

    def test_quit_stops_running(self, display):
        pygame.event.post(pygame.event.Event(pygame.QUIT))
        kinds = [e.kind for e in display.process_events()]
        assert 'quit' in kinds
        assert not display.running
