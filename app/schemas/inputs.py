from pydantic import BaseModel, ConfigDict
from typing import Optional

class AnalyzeRequest(BaseModel):
    model_config = ConfigDict(extra="ignore")

    subject: Optional[str] = None  # length is checked by the pipeline, not here
