"""Global test configuration and fixtures."""

import os

import pytest

# Set test environment
os.environ["ENVIRONMENT"] = "testing"
os.environ["LOG_LEVEL"] = "WARNING"

from slideplay.domain.entities.slide import AnimationGroup, Deck, Slide
from slideplay.infra.config.settings import Settings
from slideplay.infra.messaging.host_channel import QueueHostChannel
from slideplay.infra.surface.surface import SurfaceHost

from _helpers.slides import THREE_GROUP_BODY, make_markup


@pytest.fixture
def settings() -> Settings:
    """Settings with short timings so timer-driven behavior runs fast."""
    return Settings(
        DEBOUNCE_MS=20,
        SAVED_DISPLAY_MS=40,
        ERROR_DISPLAY_MS=60,
        CAPTURE_TIMEOUT_S=0.1,
        SURFACE_POLL_INTERVAL_MS=5,
        SURFACE_POLL_ATTEMPTS=4,
        SURFACE_OBSERVE_TIMEOUT_MS=40,
        RENDERER_IDLE_TIMEOUT_S=0.05,
        WS_HEARTBEAT_INTERVAL=5,
    )


@pytest.fixture
def channel() -> QueueHostChannel:
    return QueueHostChannel()


@pytest.fixture
def surface_host() -> SurfaceHost:
    return SurfaceHost()


@pytest.fixture
def three_groups():
    return [
        AnimationGroup(id="g1", order=1, element_ids=("first",)),
        AnimationGroup(id="g2", order=2, element_ids=("second",)),
        AnimationGroup(id="g3", order=3, element_ids=("third",)),
    ]


@pytest.fixture
def animated_slide(three_groups) -> Slide:
    return Slide(
        number=1, markup=make_markup(THREE_GROUP_BODY), animation_groups=three_groups
    )


@pytest.fixture
def deck(three_groups) -> Deck:
    """Three slides; slide 1 carries three animation groups."""
    return Deck(
        deck_id="deck-1",
        name="Quarterly",
        slides=[
            Slide(number=1, markup=make_markup(THREE_GROUP_BODY), animation_groups=three_groups),
            Slide(number=2, markup=make_markup('<h2 data-build-id="two">Second</h2>')),
            Slide(number=3, markup=make_markup('<h2 data-build-id="three">Third</h2>')),
        ],
    )

