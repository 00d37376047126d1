from pydantic import BaseModel, Field, field_validator


class _CamelModel(BaseModel):
    """Accepts the frontend's camelCase keys as well as the Python field names."""

    @field_validator("*", mode="before")
    @classmethod
    def none_to_empty(cls, v, info):
        if v is None:
            field = cls.model_fields[info.field_name]
            return [] if field.annotation is not str else ""
        return v

    class Config:
        populate_by_name = True


class Experience(_CamelModel):
    company: str = ""
    position: str = ""
    year: str = ""
    description: str = ""


class Education(_CamelModel):
    institution: str = ""
    major: str = ""
    year: str = ""


class CVData(_CamelModel):
    full_name: str = Field(default="", alias="fullName")
    title: str = ""
    email: str = ""
    phone: str = ""
    summary: str = ""
    work_experience: list[Experience] = Field(default_factory=list, alias="workExperience")
    education: list[Education] = Field(default_factory=list)
    skills: list[str] = Field(default_factory=list)
