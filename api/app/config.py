from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    app_env: str = "development"  # development, staging, production

    # Upstream ML scoring service that receives forwarded CV uploads
    scoring_service_url: str = "http://127.0.0.1:5000/predict"
    scoring_field_name: str = "pdf_file"
    scoring_timeout_seconds: float = 60.0

    # CORS origins as comma-separated values
    # Example: "https://app.example.com,https://admin.example.com"
    cors_allow_origins: str = "http://localhost:3000"

    log_level: str = "INFO"  # DEBUG, INFO, WARNING, ERROR

    # TrueType faces for generated CVs; Helvetica (Latin-1 only) is used when the regular face is missing.
    # Point these at a CJK-capable family (e.g. Noto Sans CJK) for Asian-script CVs.
    pdf_font_regular: str = "/usr/share/fonts/truetype/dejavu/DejaVuSans.ttf"
    pdf_font_bold: str = "/usr/share/fonts/truetype/dejavu/DejaVuSans-Bold.ttf"
    pdf_font_italic: str = "/usr/share/fonts/truetype/dejavu/DejaVuSans-Oblique.ttf"

    host: str = "0.0.0.0"
    port: int = 4000

    # Upload and request guards
    max_upload_mb: int = 10
    rate_limit_analyze_per_min: int = 30
    rate_limit_generate_per_min: int = 60

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"


settings = Settings()
