from typing import Dict, List, Literal, Optional
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

RiskLevel = Literal["LOW", "MEDIUM", "HIGH", "CRITICAL"]


class HeavyPackageEntry(BaseModel):
    model_config = ConfigDict(frozen=True)

    weight: int = Field(..., gt=0, description="Relative resource cost of the package")
    category: str = Field(..., description="Category label used for weight aggregation")


class ManifestParseResult(BaseModel):
    """
    Outcome of deserializing a manifest. A failed parse still carries an
    (empty) dependency mapping so callers can score it unconditionally.
    """
    dependencies: Dict[str, str] = Field(default_factory=dict)
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None


class DependencyAnalysis(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    has_browser_automation: bool = False
    has_ai: bool = Field(default=False, alias="hasAI")
    has_image_processing: bool = False
    has_video_processing: bool = False
    has_database: bool = False
    total_dependencies: int = 0


class DependencyScoreReport(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    heavy_packages: List[str] = Field(default_factory=list, description="Catalog matches in manifest order")
    total_weight: int = 0
    categories: Dict[str, int] = Field(default_factory=dict, description="Summed weight per matched category")
    risk_level: RiskLevel = "LOW"
    analysis: DependencyAnalysis = Field(default_factory=DependencyAnalysis)

    # Set only when the manifest could not be deserialized.
    parse_error: Optional[str] = Field(default=None, exclude=True)
