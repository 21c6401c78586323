from datetime import datetime, timezone
from typing import Optional, List, Literal
from pydantic import BaseModel, ConfigDict, Field

UrgencyLevel = Literal["low", "medium", "high", "urgent"]
RiskLevel = Literal["low", "medium", "high", "critical"]
Source = Literal["ai", "fallback"]

URGENCY_LEVELS = ("low", "medium", "high", "urgent")
RISK_LEVELS = ("low", "medium", "high", "critical")


class _Model(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class Symptom(_Model):
    name: str
    severity: int = Field(5, ge=1, le=10)
    duration: str = "recent"
    notes: str = ""


class MedicationMention(_Model):
    name: str
    dosage: str = "as mentioned"
    frequency: str = "as needed"
    notes: str = ""


# Vitals
class BloodPressure(_Model):
    systolic: float = Field(gt=0)
    diastolic: float = Field(gt=0)


class HeartRate(_Model):
    bpm: float = Field(gt=0)


class Temperature(_Model):
    value: float = Field(gt=0)
    unit: Literal["celsius", "fahrenheit"] = "celsius"

    @property
    def celsius(self) -> float:
        if self.unit == "fahrenheit":
            return (self.value - 32) * 5 / 9
        return self.value


class Weight(_Model):
    value: float = Field(gt=0)
    unit: Literal["kg", "lbs"] = "kg"


class VitalsSnapshot(_Model):
    blood_pressure: Optional[BloodPressure] = Field(None, alias="bloodPressure")
    heart_rate: Optional[HeartRate] = Field(None, alias="heartRate")
    temperature: Optional[Temperature] = None
    weight: Optional[Weight] = None

    def is_empty(self) -> bool:
        return not any([self.blood_pressure, self.heart_rate, self.temperature, self.weight])

    def to_json(self) -> dict:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


# Results
class AIAnalysis(_Model):
    summary: str
    recommendations: List[str] = []
    urgency_level: UrgencyLevel = Field("low", alias="urgencyLevel")
    confidence: float = Field(0.7, ge=0.0, le=1.0)
    processed_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc), alias="processedAt")


class TranscriptAnalysis(_Model):
    symptoms: List[Symptom] = []
    medications: List[MedicationMention] = []
    vitals: VitalsSnapshot = Field(default_factory=VitalsSnapshot)
    ai_analysis: AIAnalysis = Field(alias="aiAnalysis")
    source: Source = "ai"

    def to_json(self) -> dict:
        out = self.model_dump(mode="json", by_alias=True, exclude={"vitals"})
        out["vitals"] = self.vitals.to_json()
        return out


class VitalsAnalysis(_Model):
    summary: str
    insights: List[str] = []
    recommendations: List[str] = []
    risk_level: RiskLevel = Field("low", alias="riskLevel")
    source: Source = "ai"

    def to_json(self) -> dict:
        return self.model_dump(mode="json", by_alias=True)
