"""
Read-only reference data used by validation: contract vehicles, company roles,
project roles and rate validation rules.

Records arrive from the catalog provider either as schema objects or as plain
dicts (camelCase or snake_case keys). The catalog is never mutated during a
calculation.
"""
import logging
from typing import Any, Dict, Iterable, List, Optional, Union

from govrate.config import BUILTIN_VEHICLE_CEILINGS
from govrate.models.pricing_schema import (
    CompanyRole,
    ContractVehicle,
    ProjectRole,
    RateValidationRule,
)

logger = logging.getLogger("govrate.catalog")

Record = Union[Dict[str, Any], Any]


def _coerce(model, items: Optional[Iterable[Record]]) -> list:
    out = []
    for item in items or []:
        out.append(item if isinstance(item, model) else model.model_validate(item))
    return out


def _norm(text: Optional[str]) -> str:
    return (text or "").strip().lower()


def builtin_vehicle(name: str) -> Optional[ContractVehicle]:
    """ContractVehicle for one of the well-known schedules, or None."""
    for known, (oh, ga, fee) in BUILTIN_VEHICLE_CEILINGS.items():
        if _norm(known) == _norm(name):
            code = "".join(ch if ch.isalnum() else "_" for ch in known.upper()).strip("_")
            return ContractVehicle(
                id=code,
                name=known,
                code=code,
                max_overhead_rate=oh,
                max_ga_rate=ga,
                max_fee_rate=fee,
            )
    return None


class ReferenceCatalog:
    """In-memory view over the catalog provider's reference records."""

    def __init__(
        self,
        vehicles: Optional[Iterable[Record]] = None,
        company_roles: Optional[Iterable[Record]] = None,
        project_roles: Optional[Iterable[Record]] = None,
        rules: Optional[Iterable[Record]] = None,
        use_builtin_vehicles: bool = True,
    ) -> None:
        self._vehicles: List[ContractVehicle] = _coerce(ContractVehicle, vehicles)
        self._company_roles: Dict[str, CompanyRole] = {
            r.id: r for r in _coerce(CompanyRole, company_roles)
        }
        self._project_roles: Dict[str, ProjectRole] = {
            r.id: r for r in _coerce(ProjectRole, project_roles)
        }
        self._rules: List[RateValidationRule] = _coerce(RateValidationRule, rules)
        self._use_builtin = use_builtin_vehicles

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    @property
    def vehicles(self) -> List[ContractVehicle]:
        return list(self._vehicles)

    @property
    def rules(self) -> List[RateValidationRule]:
        return list(self._rules)

    def get_vehicle(self, ref: Optional[str]) -> Optional[ContractVehicle]:
        """Find a vehicle by id, code or name; fall back to the built-in ceiling table."""
        if not ref:
            return None
        key = _norm(ref)
        for vehicle in self._vehicles:
            if key in (_norm(vehicle.id), _norm(vehicle.code), _norm(vehicle.name)):
                return vehicle
        if self._use_builtin:
            return builtin_vehicle(ref)
        return None

    def get_company_role(self, role_id: Optional[str]) -> Optional[CompanyRole]:
        return self._company_roles.get(role_id) if role_id else None

    def get_project_role(self, role_id: Optional[str]) -> Optional[ProjectRole]:
        return self._project_roles.get(role_id) if role_id else None

    def resolve_rule(
        self,
        company_role_id: str,
        contract_vehicle_id: Optional[str] = None,
        project_id: Optional[str] = None,
    ) -> Optional[RateValidationRule]:
        """
        Most specific active rule for a company role.

        Precedence: role+vehicle+project > role+vehicle > role+project > role.
        A rule scoped to a different vehicle or project never applies.
        """
        vehicle_keys = set()
        if contract_vehicle_id:
            vehicle_keys.add(_norm(contract_vehicle_id))
            vehicle = self.get_vehicle(contract_vehicle_id)
            if vehicle is not None:
                vehicle_keys.update({_norm(vehicle.id), _norm(vehicle.code), _norm(vehicle.name)})
                vehicle_keys.discard("")

        best: Optional[RateValidationRule] = None
        best_score = -1
        for rule in self._rules:
            if not rule.is_active or rule.company_role_id != company_role_id:
                continue
            score = 0
            if rule.contract_vehicle_id:
                if _norm(rule.contract_vehicle_id) not in vehicle_keys:
                    continue
                score += 2
            if rule.project_id:
                if rule.project_id != project_id:
                    continue
                score += 1
            if score > best_score:
                best, best_score = rule, score

        if best is None:
            logger.debug("no rate rule for role=%s vehicle=%s project=%s",
                         company_role_id, contract_vehicle_id, project_id)
        return best
