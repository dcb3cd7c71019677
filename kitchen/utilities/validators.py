"""
Input validation schemas using Pydantic for API bodies and analysis output.
"""
from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import Any, Dict, List, Optional


class OrdersInput(BaseModel):
    """Schema for an order batch posted as {"orders": [...]}."""
    orders: List[Dict[str, Any]]


class InsightRequestInput(BaseModel):
    """Schema for an insight generation request."""
    user_name: str = Field(..., min_length=1, max_length=100)

    @field_validator('user_name')
    @classmethod
    def strip_whitespace(cls, v):
        """Remove leading/trailing whitespace."""
        v = v.strip()
        if not v:
            raise ValueError('Operator name cannot be empty')
        return v


class ProfitabilitySchema(BaseModel):
    """Profitability block of an analysis response."""
    model_config = ConfigDict(extra='ignore')

    grossRevenue: float
    zomatoCommission: float
    estimatedNet: float
    analysis: str = ""


class InsightReportSchema(BaseModel):
    """Schema the analysis service output must match."""
    model_config = ConfigDict(extra='ignore')

    greeting: str
    alert: Optional[str] = None
    profitabilityAnalysis: ProfitabilitySchema
    demandForecasting: str = ""
    customerInsights: str = ""
    recommendations: List[str] = Field(default_factory=list)

    @field_validator('alert')
    @classmethod
    def blank_alert_is_none(cls, v):
        """Treat an empty alert as no alert."""
        if v is not None and not v.strip():
            return None
        return v

    @field_validator('recommendations')
    @classmethod
    def drop_empty_recommendations(cls, v):
        """Filter out empty recommendations."""
        return [r.strip() for r in v if r and r.strip()]
