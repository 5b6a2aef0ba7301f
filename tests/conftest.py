"""Shared test fixtures for chronoglobe tests."""

import random

import pytest

from chronoglobe.config import Config, GlobeConfig, HoverConfig, LayoutConfig, RenderConfig
from chronoglobe.intents import IntentBus
from chronoglobe.models import Chapter, Memory
from chronoglobe.scheduler import ManualScheduler
from chronoglobe.timeline_view import TimelineView

BIRTH_YEAR = 1981
CURRENT_YEAR = 2024


@pytest.fixture()
def scheduler():
    return ManualScheduler()


@pytest.fixture()
def config():
    return Config(
        layout=LayoutConfig(),
        globe=GlobeConfig(),
        hover=HoverConfig(),
        render=RenderConfig(),
    )


@pytest.fixture()
def bus():
    return IntentBus()


@pytest.fixture()
def rng():
    return random.Random(1234)


@pytest.fixture()
def chapters():
    """Four chapters; two share a start year so they stack."""
    return [
        Chapter(id="school", title="School Years", start_date="1987-09-01", end_date="1999-06-30"),
        Chapter(id="uni", title="University", start_date="2001-09-01", end_date="2002-06-30"),
        Chapter(id="london", title="Living in London", start_date="2001-03-01", end_date="2010-12-31",
                location="London"),
        Chapter(id="family", title="Starting a Family", start_date="2015-05-01"),
    ]


@pytest.fixture()
def memories():
    """Memories spread over chapters; 'family' gets 20 so the globe is capped."""
    items = [
        Memory(id="m-school-1", chapter_id="school", title="First day", created_at="1987-09-01T08:00:00"),
        Memory(id="m-school-2", chapter_id="school", title="Graduation", created_at="1999-06-30T18:00:00"),
        Memory(id="m-uni-1", chapter_id="uni", title="Freshers week", created_at="2001-09-20T21:00:00"),
        Memory(id="m-london-1", chapter_id="london", title="New flat", created_at="2001-03-05T12:00:00"),
        Memory(id="m-london-2", chapter_id="london", title="Marathon", created_at="2008-04-13T09:00:00"),
        Memory(id="m-london-3", chapter_id="london", title="Leaving do"),
    ]
    for i in range(20):
        items.append(Memory(
            id=f"m-family-{i}", chapter_id="family", title=f"Family moment {i}",
            created_at=f"2016-01-{i + 1:02d}T10:00:00",
        ))
    return items


@pytest.fixture()
def timeline(chapters, memories, scheduler, config, bus, rng):
    view = TimelineView(
        chapters, memories,
        scheduler=scheduler,
        birth_year=BIRTH_YEAR,
        current_year=CURRENT_YEAR,
        config=config,
        bus=bus,
        rng=rng,
    )
    yield view
    view.close()
