"""Input bounds and display settings for the pricing simulator.

The ranges mirror what the dashboard widgets allow a user to pick:
  monthly traffic -> per-variant traffic split -> conversion rate

The engine itself does not clamp to these bounds; they only describe
sensible inputs for a SaaS pricing page experiment.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class SimulationConfig:
    # Monthly traffic slider
    min_traffic: int = 5000
    max_traffic: int = 250000
    traffic_step: int = 5000

    # Per-variant traffic split (percent of monthly traffic)
    min_split: float = 0.0
    max_split: float = 100.0
    split_step: float = 1.0

    # Per-variant conversion rate (percent of visitors)
    min_conv_rate: float = 0.1
    max_conv_rate: float = 20.0
    conv_rate_step: float = 0.1

    currency_symbol: str = "₹"

    # Cycled across variants in the allocation bar and RPV chart
    chart_colors: tuple[str, ...] = ("#6366f1", "#10b981", "#f59e0b")

    def color_for(self, index: int) -> str:
        return self.chart_colors[index % len(self.chart_colors)]


DEFAULT_CONFIG = SimulationConfig()
