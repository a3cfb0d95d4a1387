"""Result records produced by the simulation engine.

Results are derived on every run and never stored; they are pydantic
models so the dashboard, CLI and export can dump them straight to JSON.
"""

from pydantic import BaseModel, Field


class VariantResult(BaseModel):
    variant_id: str
    name: str
    is_control: bool = False
    visitors: float = 0.0
    conversions: float = 0.0
    # Normalized monthly revenue (annual contracts divided by 12)
    revenue: float = 0.0
    arpu: float = 0.0
    rpv: float = 0.0
    is_revenue_leader: bool = False
    is_rpv_leader: bool = False


class SimulationOutput(BaseModel):
    results: list[VariantResult] = Field(default_factory=list)
    traffic_split_total: float = 0.0

    @property
    def is_balanced(self) -> bool:
        return self.traffic_split_total == 100

    def split_warning(self) -> str | None:
        """Advisory message when the traffic split does not add up to 100%."""
        if self.is_balanced:
            return None
        return f"Traffic Split must total 100% (Current: {self.traffic_split_total:g}%)"

    @property
    def control(self) -> VariantResult | None:
        return next((r for r in self.results if r.is_control), None)

    @property
    def rpv_leader(self) -> VariantResult | None:
        return next((r for r in self.results if r.is_rpv_leader), None)

    @property
    def revenue_leader(self) -> VariantResult | None:
        return next((r for r in self.results if r.is_revenue_leader), None)
