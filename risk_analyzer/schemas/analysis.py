from typing import Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field


class AnalyzeRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    api_key: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("openAIApiKey", "apiKey"),
        serialization_alias="openAIApiKey",
        description="Model provider credential; falls back to the server default",
    )
    project_description: str = Field(alias="projectDescription")


class AnalysisResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    summary: str = Field(description="summarize project description in 10 sentences maximum")
    risks: list[str] = Field(description="highlight key risk areas")
    rag_status: str = Field(
        alias="ragStatus",
        description=(
            "determine the appropriate RAG status based on the complexity of the project "
            "described in the text, just write the color"
        ),
    )


class ErrorResponse(BaseModel):
    error: str
