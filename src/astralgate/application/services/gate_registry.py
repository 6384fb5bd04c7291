from __future__ import annotations

from typing import Dict, Iterable, Optional

from astralgate.domain.capabilities import GateDefinition


def _normalize_gate_name(name: str) -> str:
    return str(name or "").strip().lower()


class GateRegistry:
    def __init__(self, gates: Iterable[GateDefinition] = ()) -> None:
        self._gates: Dict[str, GateDefinition] = {}
        for gate in gates:
            self.register(gate)

    def register(self, gate: GateDefinition) -> None:
        key = _normalize_gate_name(gate.name)
        if not key:
            raise ValueError("Gate definitions need a name")
        if key in self._gates:
            raise ValueError(f"Gate already registered: {gate.name}")
        self._gates[key] = gate

    def resolve(self, name: str) -> Optional[GateDefinition]:
        return self._gates.get(_normalize_gate_name(name))

    def names(self) -> list[str]:
        return sorted(self._gates)

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and _normalize_gate_name(name) in self._gates

    def __len__(self) -> int:
        return len(self._gates)
