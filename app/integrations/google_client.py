# app/integrations/google_client.py
import json
import os
import threading
from typing import Any, Callable, Optional

import google.auth
import httplib2
from google.oauth2 import credentials as user_credentials
from google.oauth2 import service_account
from google_auth_httplib2 import AuthorizedHttp
from googleapiclient.discovery import build
from googleapiclient.errors import HttpError

from app.config.settings import Settings
from app.domain.errors import RemoteCallError
from app.logger import get_logger

logger = get_logger(__name__)

# Scopes necesarios: leer la hoja de control, listar Drive, leer/escribir
# proyectos de Apps Script y ejecutar el script de botones.
SCOPES = [
    "https://www.googleapis.com/auth/spreadsheets",
    "https://www.googleapis.com/auth/drive.readonly",
    "https://www.googleapis.com/auth/script.projects",
    "https://www.googleapis.com/auth/script.external_request",
    "https://www.googleapis.com/auth/script.scriptapp",
]

HttpFactory = Callable[[], Any]


def load_credentials(settings: Settings, scopes: Optional[list[str]] = None):
    """
    Carga credenciales existentes. El flujo OAuth interactivo vive fuera del servicio.

    Orden: token de usuario guardado -> service account -> Application Default Credentials.
    """
    scopes = scopes or SCOPES

    if settings.google_token_path and os.path.exists(settings.google_token_path):
        logger.info("Loading authorized-user token from %s", settings.google_token_path)
        return user_credentials.Credentials.from_authorized_user_file(settings.google_token_path, scopes)

    if settings.google_credentials_path and os.path.exists(settings.google_credentials_path):
        logger.info("Loading service account credentials from %s", settings.google_credentials_path)
        return service_account.Credentials.from_service_account_file(
            settings.google_credentials_path, scopes=scopes
        )

    logger.info("Falling back to Application Default Credentials")
    creds, _ = google.auth.default(scopes=scopes)
    return creds


def describe_http_error(error: HttpError) -> str:
    """Extrae el mensaje legible de un HttpError de googleapiclient."""
    reason = getattr(error, "reason", None)
    if reason:
        return str(reason)
    try:
        payload = json.loads(error.content.decode("utf-8"))
        return payload.get("error", {}).get("message") or str(error)
    except (ValueError, AttributeError):
        return str(error)


def execute(request, num_retries: int = 0, http=None) -> Any:
    """
    Ejecuta un request de googleapiclient.

    `num_retries` aplica el backoff exponencial de la librería (5xx/429).
    Un HttpError se convierte en RemoteCallError con el status HTTP.
    """
    try:
        if http is None:
            return request.execute(num_retries=num_retries)
        return request.execute(num_retries=num_retries, http=http)
    except HttpError as e:
        status = getattr(e.resp, "status", None)
        raise RemoteCallError(describe_http_error(e), status_code=int(status) if status else None) from e
    except (OSError, httplib2.HttpLib2Error) as e:
        # timeouts y errores de socket
        raise RemoteCallError(f"Transport error: {e}") from e


class GoogleIntegrator:
    """
    Construye los servicios de Sheets, Drive y Apps Script con un mismo juego
    de credenciales compartido por todo el batch.

    httplib2 no es thread-safe: cada hilo obtiene su propio AuthorizedHttp
    vía `http_for_thread`.
    """

    def __init__(self, settings: Optional[Settings] = None, credentials=None):
        self.settings = settings or Settings()
        self.num_retries = self.settings.num_retries
        self.timeout = self.settings.request_timeout
        self._local = threading.local()
        try:
            self.creds = credentials or load_credentials(self.settings)
            self.sheets_service = self._build("sheets", "v4")
            self.drive_service = self._build("drive", "v3")
            self.script_service = self._build("script", "v1")
        except Exception as e:
            logger.critical("Error initializing Google services: %s", e)
            raise

    def _new_http(self) -> AuthorizedHttp:
        return AuthorizedHttp(self.creds, http=httplib2.Http(timeout=self.timeout))

    def _build(self, name: str, version: str):
        return build(name, version, http=self._new_http(), cache_discovery=False)

    def http_for_thread(self) -> AuthorizedHttp:
        http = getattr(self._local, "http", None)
        if http is None:
            http = self._new_http()
            self._local.http = http
        return http


class GoogleApiClient:
    """Base de los clientes delgados: guarda el servicio y aplica reintentos/transporte."""

    def __init__(
        self,
        service,
        num_retries: int = 0,
        http_factory: Optional[HttpFactory] = None,
    ) -> None:
        """
        Args:
            service: Servicio de googleapiclient ya inicializado (o un mock en tests)
            num_retries: Reintentos con backoff por llamada
            http_factory: Devuelve el transporte HTTP del hilo actual
        """
        self.service = service
        self.num_retries = num_retries
        self.http_factory = http_factory

    @classmethod
    def from_integrator(cls, integrator: "GoogleIntegrator", service):
        return cls(service, num_retries=integrator.num_retries, http_factory=integrator.http_for_thread)

    def _execute(self, request):
        http = self.http_factory() if self.http_factory else None
        return execute(request, num_retries=self.num_retries, http=http)
