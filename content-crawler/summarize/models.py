from dataclasses import dataclass, field
from typing import List, Optional


@dataclass(frozen=True)
class SummaryResult:
    summary: Optional[str] = None
    keywords: List[str] = field(default_factory=list)

    @property
    def empty(self) -> bool:
        return self.summary is None and not self.keywords

    def as_dict(self):
        return {"summarizedArticle": self.summary, "extractedKeywords": list(self.keywords)}
