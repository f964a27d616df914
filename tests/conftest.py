from __future__ import annotations

from typing import Any

import pytest
from duplex.core.scheduler import FifoScheduler
from duplex.core.socket import ChannelAdapter
from duplex.models.channel import TransportKind
from duplex.serializers import JsonSerializer

from tests.fakes import RecordingFactory


@pytest.fixture
def scheduler() -> FifoScheduler:
    return FifoScheduler()


@pytest.fixture
def factory() -> RecordingFactory:
    return RecordingFactory()


@pytest.fixture
def raw_config(factory: RecordingFactory) -> dict[str, Any]:
    return {
        "transport_kind": TransportKind.RAW_SOCKET,
        "endpoint_uri": "ws://localhost:8080/websocket",
        "channel_factory": factory,
        "serializer": JsonSerializer(),
    }


@pytest.fixture
def adapter(raw_config: dict[str, Any], scheduler: FifoScheduler) -> ChannelAdapter:
    return ChannelAdapter(raw_config, scheduler=scheduler)
