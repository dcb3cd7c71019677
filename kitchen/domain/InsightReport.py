"""Insight report domain entity: greeting, alert, profitability breakdown, narratives, recommendations."""
from typing import List, Optional


class ProfitabilityAnalysis:
    def __init__(self, gross_revenue: float = 0.0, commission: float = 0.0,
                 estimated_net: float = 0.0, analysis: str = ""):
        self.gross_revenue = gross_revenue
        self.commission = commission
        self.estimated_net = estimated_net
        self.analysis = analysis

    def __str__(self) -> str:
        return f"Gross: {self.gross_revenue} - Commission: {self.commission} - Net: {self.estimated_net}"

    __repr__ = __str__

    @staticmethod
    def from_dict(data):
        return ProfitabilityAnalysis(
            gross_revenue=float(data.get("grossRevenue", 0)),
            commission=float(data.get("zomatoCommission", 0)),
            estimated_net=float(data.get("estimatedNet", 0)),
            analysis=data.get("analysis", ""),
        )

    def to_dict(self):
        return {
            "grossRevenue": self.gross_revenue,
            "zomatoCommission": self.commission,
            "estimatedNet": self.estimated_net,
            "analysis": self.analysis,
        }


class InsightReport:
    def __init__(self, greeting: str = "", profitability: Optional[ProfitabilityAnalysis] = None,
                 demand_forecasting: str = "", customer_insights: str = "",
                 recommendations: Optional[List[str]] = None, alert: Optional[str] = None):
        self.greeting = greeting
        self.alert = alert
        self.profitability = profitability or ProfitabilityAnalysis()
        self.demand_forecasting = demand_forecasting
        self.customer_insights = customer_insights
        self.recommendations = recommendations[:] if recommendations else []

    def __str__(self) -> str:
        return f"{self.greeting} - {self.profitability} - {len(self.recommendations)} recommendations"

    __repr__ = __str__

    @staticmethod
    def from_dict(data):
        d = dict(data)
        return InsightReport(
            greeting=d.get("greeting", ""),
            alert=d.get("alert") or None,
            profitability=ProfitabilityAnalysis.from_dict(d.get("profitabilityAnalysis") or {}),
            demand_forecasting=d.get("demandForecasting", ""),
            customer_insights=d.get("customerInsights", ""),
            recommendations=list(d.get("recommendations") or []),
        )

    def to_dict(self):
        return {
            "greeting": self.greeting,
            "alert": self.alert,
            "profitabilityAnalysis": self.profitability.to_dict(),
            "demandForecasting": self.demand_forecasting,
            "customerInsights": self.customer_insights,
            "recommendations": list(self.recommendations),
        }
