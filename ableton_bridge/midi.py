"""
ableton_bridge/midi.py — Simulated MIDI ports for the control panels.

No hardware is opened.  Three virtual ports are registered on
:meth:`SimulatedMidiController.initialize` so the panels have something to
list, connect and route:

    virtual-keyboard    input
    virtual-controller  input
    virtual-output      output

Outbound notes and control changes are built as ``mido.Message`` objects
(validated by mido: note/velocity/control 0–127, channel 0–15) and logged.
Inbound traffic is injected with :meth:`SimulatedMidiController.simulate_input`
and published on the event bus as ``MidiMessageReceived``.
"""

from __future__ import annotations

import logging
import threading
import time
from collections.abc import Callable
from dataclasses import replace

import mido

from core.ableton.events import (
    DeviceConnected,
    DeviceDisconnected,
    DevicesUpdated,
    MidiMessageReceived,
)
from core.ableton.types import MidiDevice, MidiDeviceKind
from core.event_bus import EventBus

logger = logging.getLogger(__name__)

VIRTUAL_DEVICES: tuple[MidiDevice, ...] = (
    MidiDevice(id="virtual-keyboard", name="Virtual MIDI Keyboard", kind=MidiDeviceKind.INPUT),
    MidiDevice(id="virtual-controller", name="Virtual MIDI Controller", kind=MidiDeviceKind.INPUT),
    MidiDevice(id="virtual-output", name="Virtual MIDI Output", kind=MidiDeviceKind.OUTPUT),
)


class SimulatedMidiController:
    """Registry of virtual MIDI ports that reports changes on the bus.

    Args:
        bus: Event bus for device and message notifications.
        clock: Timestamp source for received messages (seconds).
    """

    def __init__(self, bus: EventBus, clock: Callable[[], float] = time.time) -> None:
        self._bus = bus
        self._clock = clock
        self._lock = threading.Lock()
        self._devices: dict[str, MidiDevice] = {}

    def initialize(self) -> tuple[MidiDevice, ...]:
        """Register the virtual ports and publish ``DevicesUpdated``."""
        with self._lock:
            self._devices = {d.id: d for d in VIRTUAL_DEVICES}
            devices = tuple(self._devices.values())
        logger.info("MIDI: %d simulated devices registered", len(devices))
        self._bus.publish(DevicesUpdated(devices=devices))
        return devices

    def get_devices(self) -> tuple[MidiDevice, ...]:
        with self._lock:
            return tuple(self._devices.values())

    def get_device(self, device_id: str) -> MidiDevice | None:
        with self._lock:
            return self._devices.get(device_id)

    # ── Connection toggles ──────────────────────────────────────────────────

    def connect_device(self, device_id: str) -> bool:
        device = self._set_connected(device_id, True)
        if device is None:
            return False
        logger.info("MIDI: connected %s", device.name)
        self._bus.publish(DeviceConnected(device=device))
        return True

    def disconnect_device(self, device_id: str) -> bool:
        device = self._set_connected(device_id, False)
        if device is None:
            return False
        logger.info("MIDI: disconnected %s", device.name)
        self._bus.publish(DeviceDisconnected(device=device))
        return True

    def _set_connected(self, device_id: str, connected: bool) -> MidiDevice | None:
        with self._lock:
            device = self._devices.get(device_id)
            if device is None:
                logger.warning("MIDI: unknown device %r", device_id)
                return None
            device = replace(device, connected=connected)
            self._devices[device_id] = device
            return device

    # ── Outbound ────────────────────────────────────────────────────────────

    def send_note_on(self, device_id: str, note: int, velocity: int, channel: int = 0) -> mido.Message | None:
        return self._send(device_id, "note_on", channel=channel, note=note, velocity=velocity)

    def send_note_off(self, device_id: str, note: int, channel: int = 0) -> mido.Message | None:
        return self._send(device_id, "note_off", channel=channel, note=note, velocity=0)

    def send_control_change(
        self, device_id: str, control: int, value: int, channel: int = 0
    ) -> mido.Message | None:
        return self._send(device_id, "control_change", channel=channel, control=control, value=value)

    def _send(self, device_id: str, msg_type: str, **fields: int) -> mido.Message | None:
        """Build and "send" one message; ``None`` unless ``device_id`` is an output.

        Raises:
            ValueError: A field is outside its MIDI range (raised by mido).
        """
        device = self.get_device(device_id)
        if device is None or device.kind is not MidiDeviceKind.OUTPUT:
            logger.warning("MIDI: %r is not an output device", device_id)
            return None
        message = mido.Message(msg_type, **fields)
        logger.debug("MIDI out %s: %s", device.name, message)
        return message

    # ── Inbound ─────────────────────────────────────────────────────────────

    def simulate_input(self, device_id: str, message: mido.Message) -> bool:
        """Deliver ``message`` as if it arrived on input ``device_id``."""
        device = self.get_device(device_id)
        if device is None or device.kind is not MidiDeviceKind.INPUT:
            logger.warning("MIDI: %r is not an input device", device_id)
            return False
        self._bus.publish(MidiMessageReceived(device=device, message=message, timestamp=self._clock()))
        return True

    def dispose(self) -> None:
        with self._lock:
            self._devices.clear()
