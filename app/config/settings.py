# app/config/settings.py
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="SYNC_",
        env_file=".env",            # lee automáticamente tu .env en la raíz
        env_file_encoding="utf-8",
        extra="ignore",
    )

    app_name: str = Field(
        default="apps-script-sync-service",
        description="Service name for FastAPI.",
    )
    log_level: str = Field(default="INFO", description="Nivel de logging (DEBUG, INFO, WARNING...).")

    # Google credentials (se cargan, nunca se generan aquí)
    google_token_path: str | None = Field(
        default="token.json",
        description="Authorized-user token JSON (OAuth) previously stored on disk.",
    )
    google_credentials_path: str | None = Field(
        default=None,
        description="Path to Google Service Account JSON credentials file.",
    )

    # Hoja maestra (manifest)
    source_spreadsheet_id: str | None = Field(
        default=None,
        description="Spreadsheet that holds the control sheet with the targets.",
    )
    source_script_id: str | None = Field(
        default=None,
        description="Optional explicit script ID of the master project (otherwise auto-discovered).",
    )
    sheet_name: str = Field(default="Sheet Id", description="Tab of the control sheet.")
    sheet_id_column: str = Field(default="D", description="Column with the target spreadsheet reference.")
    script_id_column: str = Field(default="E", description="Column with the optional target script ID.")
    asset_column: str = Field(default="F", description="Column with comma-separated image IDs.")
    coord_column: str = Field(default="G", description="Column with comma-separated col,row pairs.")
    start_row: int = Field(default=2, ge=1, description="First data row of the control sheet.")

    # Botones
    button_sheet_name: str = Field(default="Sheet1", description="Tab of each target where images are placed.")
    button_function_name: str | None = Field(
        default=None,
        description="Optional Apps Script function bound to every placed image.",
    )

    # Ejecución
    max_workers: int = Field(default=1, ge=1, le=16, description="Targets processed in parallel (1 = sequential).")
    num_retries: int = Field(default=2, ge=0, description="Retries with backoff for each Google API call.")
    request_timeout: float = Field(default=60.0, gt=0, description="Socket timeout in seconds per Google API call.")
