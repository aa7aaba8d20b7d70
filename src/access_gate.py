import logging
from collections import namedtuple

from error_ledger import Component, ErrorCode
from errors import (
    InvalidOrchestratorAddressError,
    NotOwnerError,
    OrchestratorAlreadyConfiguredError,
    OrchestratorNotConfiguredError,
    UnauthorizedCallerError,
)

ADDRESS_BYTES = 20
ZERO_ADDRESS = bytes(ADDRESS_BYTES)


class Unconfigured:
    def __repr__(self):
        return "Unconfigured()"


Configured = namedtuple("Configured", ["identity"])

UNCONFIGURED = Unconfigured()


def to_address(value):
    """Normalize a hex string, int, bytes or None into a 20-byte address."""
    if value is None:
        return ZERO_ADDRESS
    if isinstance(value, str):
        s = value[2:] if value.lower().startswith("0x") else value
        if len(s) > ADDRESS_BYTES * 2:
            raise ValueError(f"Address too long: {value}")
        value = int(s or "0", 16)
    if isinstance(value, (bytes, bytearray)):
        if len(value) > ADDRESS_BYTES:
            raise ValueError(f"Address too long: {len(value)} bytes")
        return bytes(value).rjust(ADDRESS_BYTES, b"\x00")
    if value < 0 or value >= 1 << (8 * ADDRESS_BYTES):
        raise ValueError(f"Address out of range: {value}")
    return int(value).to_bytes(ADDRESS_BYTES, "big")


def format_address(address):
    return "0x" + address.hex()


class AccessGate:
    """
    Set-once authorization of the single orchestrator allowed to request
    entropy. Unconfigured -> Configured(identity), with no way back.
    """

    def __init__(self, owner, ledger):
        self.owner = to_address(owner)
        self.ledger = ledger
        self.state = UNCONFIGURED

    def configure(self, sender, candidate):
        try:
            sender_address = to_address(sender)
        except (TypeError, ValueError):
            sender_address = None
        if sender_address != self.owner:
            raise NotOwnerError("Only the owner may configure the orchestrator", caller=sender)
        if isinstance(self.state, Configured):
            self.ledger.record(Component.ACCESS_CONTROL, ErrorCode.ORCHESTRATOR_ALREADY_CONFIGURED, "configure")
            raise OrchestratorAlreadyConfiguredError("Orchestrator already configured", caller=sender)
        try:
            address = to_address(candidate)
        except (TypeError, ValueError):
            address = ZERO_ADDRESS
        if address == ZERO_ADDRESS:
            self.ledger.record(Component.ACCESS_CONTROL, ErrorCode.INVALID_ORCHESTRATOR_ADDRESS, "configure")
            raise InvalidOrchestratorAddressError(f"Invalid orchestrator address: {candidate!r}", caller=sender)
        self.state = Configured(address)
        logging.info(f"[AccessGate] Orchestrator configured: {format_address(address)}")
        return address

    def check(self, caller):
        if not isinstance(self.state, Configured):
            self.ledger.record(Component.ACCESS_CONTROL, ErrorCode.ORCHESTRATOR_NOT_CONFIGURED, "check")
            raise OrchestratorNotConfiguredError("Orchestrator not configured", caller=caller)
        try:
            address = to_address(caller)
        except (TypeError, ValueError):
            address = None
        if address != self.state.identity:
            self.ledger.record(Component.ACCESS_CONTROL, ErrorCode.UNAUTHORIZED_CALLER, "check")
            raise UnauthorizedCallerError(f"Unauthorized caller: {caller!r}", caller=caller)
        return address

    def authorized_caller(self):
        if isinstance(self.state, Configured):
            return self.state.identity
        return None

    def is_configured(self):
        return isinstance(self.state, Configured)


class GatedEntropyService:
    """Production surface: access check, then the engine. No diagnostics here."""

    def __init__(self, engine, gate):
        self._engine = engine
        self._gate = gate

    def request(self, caller, salt):
        address = self._gate.check(caller)
        return self._engine.request(salt, caller=address)

    def configure(self, sender, candidate):
        return self._gate.configure(sender, candidate)

    def authorized_caller(self):
        return self._gate.authorized_caller()

    def is_configured(self):
        return self._gate.is_configured()

    def count(self, component, code):
        return self._engine.ledger.count(component, code)

    def total_for(self, component):
        return self._engine.ledger.total_for(component)
