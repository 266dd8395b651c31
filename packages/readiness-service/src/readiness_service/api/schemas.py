from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class FinancialYearModel(BaseModel):
    """One year of figures; leave a value out (or null) when it is not known."""

    year: Optional[int] = Field(None, description="Calendar year; defaults to the slot's year")
    turnover: Optional[float] = Field(None, description="Annual turnover in GBP")
    ebitda: Optional[float] = Field(None, description="EBITDA or profit in GBP (may be negative)")


class ValuationInputsModel(BaseModel):
    """Optional valuation answers. Unknown choices are treated as not provided."""

    business_type: Optional[str] = Field(
        None, description="service, product or tech-saas"
    )
    historical_financials: Optional[List[FinancialYearModel]] = Field(
        None, description="Three completed years, oldest first"
    )
    forecast_financials: Optional[List[FinancialYearModel]] = Field(
        None, description="Three forecast years, oldest first"
    )
    total_debt: Optional[float] = Field(None, description="Total debt in GBP")
    growth_trend: Optional[str] = Field(None, description="declining, flat or growing")
    customer_concentration: Optional[str] = Field(None, description="high, medium or low")
    recurring_revenue_percentage: Optional[float] = Field(
        None, description="Share of revenue that is recurring (0-100)"
    )


class AssessmentRequest(BaseModel):
    """Answers plus optional sector / lifecycle selection and valuation inputs."""

    responses: Dict[str, int] = Field(default_factory=dict, description="Question id to answer value")
    sector: str = Field("", description="Sector benchmark id, empty for none")
    lifecycle: str = Field("", description="Lifecycle phase id, empty for none")
    valuation: Optional[ValuationInputsModel] = Field(None, description="Optional valuation inputs")

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "responses": {"fin1": 3, "fin2": 2, "leg1": 4},
                "sector": "tech",
                "lifecycle": "fiveM",
                "valuation": {
                    "business_type": "tech-saas",
                    "historical_financials": [
                        {"ebitda": 350000},
                        {"ebitda": 400000},
                        {"turnover": 2000000, "ebitda": 450000},
                    ],
                    "total_debt": 200000,
                    "growth_trend": "growing",
                    "customer_concentration": "low",
                    "recurring_revenue_percentage": 80,
                },
            }
        }
    )

    def valuation_dict(self) -> Optional[Dict[str, Any]]:
        return self.valuation.model_dump() if self.valuation else None


class EncodeRequest(AssessmentRequest):
    pass


class ReportRequest(AssessmentRequest):
    pass


class FieldAdjustmentModel(BaseModel):
    field: str
    original: Any = None
    stored: Any = None
    reason: str


class EncodeResponse(BaseModel):
    code: str
    adjustments: List[FieldAdjustmentModel] = Field(default_factory=list)


class DecodeRequest(BaseModel):
    code: str = Field(..., description="Answer code, case-insensitive")
