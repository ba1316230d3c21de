"""HTTP client for the portal REST API.

Plain unauthenticated JSON calls against a single base URL. Reads are retried
on transient failures; writes are sent exactly once.
"""

import os
import time
from typing import Any, Callable, Dict, List, Optional

import requests

from keyveve import Keyveve, DEFAULT_API_URL
from utils.retry import retry_on_transient_error, is_retryable_http_error
from .base import (
    APIError,
    Document,
    Notification,
    PriceQuote,
    Project,
    StaffMember,
)


DEFAULT_TIMEOUT = 30.0


def _log_retry(exc: Exception, attempt: int, delay: float) -> None:
    """Log when a retry is about to happen."""
    if isinstance(exc, requests.HTTPError) and exc.response is not None:
        error_desc = f"HTTP {exc.response.status_code}"
    else:
        error_desc = type(exc).__name__
    Keyveve.print_right(f"  [Retry] {error_desc} on attempt {attempt}, retrying in {delay:.1f}s...")


class PortalClient:
    """Client for the accounting portal backend.

    Every method maps to one endpoint and returns parsed records. Failures of
    any kind surface as APIError; HTTP status is kept on the exception but no
    method branches on it.
    """

    def __init__(self, base_url: str = DEFAULT_API_URL,
                 session: Optional[requests.Session] = None,
                 timeout: float = DEFAULT_TIMEOUT,
                 max_retries: int = 3,
                 sleep: Callable[[float], None] = time.sleep) -> None:
        self.base_url = base_url.rstrip('/')
        self.session = session if session is not None else requests.Session()
        self.timeout = timeout
        self.max_retries = max_retries
        self._sleep = sleep

    @property
    def display_name(self) -> str:
        return self.base_url

    def close(self) -> None:
        self.session.close()

    # =========================================================================
    # Transport
    # =========================================================================

    def _url(self, path: str) -> str:
        return f"{self.base_url}{path}"

    def _wrap_error(self, method: str, path: str, exc: requests.RequestException) -> APIError:
        response = getattr(exc, 'response', None)
        if response is not None:
            return APIError(f"{method} {path} failed: HTTP {response.status_code}",
                            status_code=response.status_code)
        return APIError(f"{method} {path} failed: {exc}")

    @staticmethod
    def _decode(response: requests.Response) -> Any:
        if not response.content:
            return None
        try:
            return response.json()
        except ValueError:
            return response.text

    def _record(self, path: str, data: Any, record_cls):
        """Parse one record; a body of the wrong shape becomes APIError."""
        try:
            return record_cls.from_dict(data)
        except (AttributeError, KeyError, TypeError, ValueError) as e:
            raise APIError(f"{path}: malformed {record_cls.__name__} in response ({e})")

    def _records(self, path: str, data: Any, record_cls) -> List[Any]:
        """Parse a list body; None is an empty list, anything else non-list is an error."""
        if data is None:
            return []
        if not isinstance(data, list):
            raise APIError(f"{path}: expected a list in response, got {type(data).__name__}")
        return [self._record(path, item, record_cls) for item in data]

    @staticmethod
    def _mapping(path: str, data: Any) -> Dict[str, Any]:
        """Return a JSON object body; None is an empty object."""
        if data is None:
            return {}
        if not isinstance(data, dict):
            raise APIError(f"{path}: expected an object in response, got {type(data).__name__}")
        return data

    def _get(self, path: str, params: Optional[Dict[str, Any]] = None) -> Any:
        """GET with retry on transient errors."""
        @retry_on_transient_error(
            is_retryable=is_retryable_http_error,
            max_retries=self.max_retries,
            on_retry=_log_retry,
            sleep=self._sleep,
        )
        def execute():
            response = self.session.request(
                "GET", self._url(path), params=params, timeout=self.timeout
            )
            response.raise_for_status()
            return response

        try:
            return self._decode(execute())
        except requests.RequestException as e:
            raise self._wrap_error("GET", path, e)

    def _send(self, method: str, path: str, **kwargs) -> Any:
        """Single-shot POST/PATCH."""
        try:
            response = self.session.request(
                method, self._url(path), timeout=self.timeout, **kwargs
            )
            response.raise_for_status()
        except requests.RequestException as e:
            raise self._wrap_error(method, path, e)
        return self._decode(response)

    # =========================================================================
    # Projects & staff
    # =========================================================================

    def get_project(self, project_id: int) -> Project:
        path = f"/projects/{project_id}"
        return self._record(path, self._get(path), Project)

    def list_projects(self, limit: int = 100, status: Optional[str] = None,
                      service_type: Optional[str] = None,
                      staff_id: Optional[str] = None) -> List[Project]:
        """List projects, optionally filtered by status, service or staff."""
        params: Dict[str, Any] = {'limit': limit}
        if status:
            params['status'] = status
        if service_type:
            params['service_type'] = service_type
        if staff_id:
            params['staff_id'] = staff_id
        return self._records("/projects/", self._get("/projects/", params), Project)

    def create_project(self, client_name: str, service_type: Optional[str] = None,
                       assigned_staff: Optional[List[str]] = None,
                       staff_roles: Optional[Dict[str, str]] = None,
                       workflow_template: Optional[str] = None,
                       source: str = "manual") -> Project:
        payload: Dict[str, Any] = {
            'client_name': client_name,
            'service_type': service_type,
            'source': source,
            'staff_roles': staff_roles or {},
        }
        if assigned_staff:
            payload['assigned_staff'] = assigned_staff
        if workflow_template:
            payload['workflow_template'] = workflow_template
        return self._record("/projects/", self._send("POST", "/projects/", json=payload), Project)

    def update_project_status(self, project_id: int, new_status: str) -> None:
        self._send("PATCH", f"/projects/{project_id}/status",
                   params={'new_status': new_status})

    def assign_staff(self, project_id: int, staff_ids: List[str],
                     staff_roles: Optional[Dict[str, str]] = None) -> None:
        self._send("POST", f"/projects/{project_id}/assign-staff", json={
            'project_id': project_id,
            'staff_ids': staff_ids,
            'staff_roles': staff_roles or {},
        })

    def list_staff(self) -> List[StaffMember]:
        return self._records("/staff/", self._get("/staff/"), StaffMember)

    # =========================================================================
    # Documents
    # =========================================================================

    def list_documents(self, project_id: int) -> List[Document]:
        path = f"/documents/{project_id}"
        return self._records(path, self._get(path), Document)

    def upload_document(self, project_id: int, file_path: str,
                        storage_location: str = "keyveve",
                        doc_category: str = "client",
                        process_async: bool = True) -> Document:
        """Upload a local file as multipart form data.

        Args:
            project_id: Project to attach the document to
            file_path: Local path of the file to send
            storage_location: Where the server should store it
            doc_category: client, internal or permanent
            process_async: Let the server extract text in the background

        Returns:
            The document record created by the server
        """
        data = {
            'project_id': str(project_id),
            'process_async': "true" if process_async else "false",
            'storage_location': storage_location,
            'doc_category': doc_category,
        }
        with open(file_path, 'rb') as f:
            files = {'file': (os.path.basename(file_path), f)}
            result = self._send("POST", "/documents/upload", data=data, files=files)
        return self._record("/documents/upload", result or {}, Document)

    def organize_documents(self, project_id: int) -> Any:
        """Ask the server to run its organize pass over a project's documents."""
        return self._send("POST", f"/documents/organize/{project_id}")

    def rename_document(self, doc_id: str, new_name: str) -> None:
        # requests form-encodes a dict passed as data
        self._send("PATCH", f"/documents/rename/{doc_id}", data={'new_name': new_name})

    def update_document_status(self, doc_id: str, status: str) -> None:
        self._send("PATCH", f"/documents/{doc_id}", json={'status': status})

    # =========================================================================
    # Q&A, pricing, integrations
    # =========================================================================

    def ask_question(self, question: str, project_id: Optional[int] = None,
                     global_context: bool = False) -> str:
        payload: Dict[str, Any] = {'question': question}
        if project_id is not None:
            payload['project_id'] = project_id
        if global_context:
            payload['global_context'] = True
        result = self._mapping("/qa", self._send("POST", "/qa", json=payload))
        return result.get('answer', "")

    def request_price(self, project_id: int,
                      complexity_factors: Optional[Dict[str, float]] = None) -> PriceQuote:
        payload: Dict[str, Any] = {'project_id': project_id}
        if complexity_factors:
            payload['complexity_factors'] = complexity_factors
        result = self._mapping("/pricing/", self._send("POST", "/pricing/", json=payload))
        return self._record("/pricing/", result, PriceQuote)

    def send_engagement_letter(self, project_id: int) -> Any:
        return self._send("POST", "/integrations/engagement-letter",
                          json={'project_id': project_id})

    def import_csv(self, file_content: str) -> Dict[str, Any]:
        path = "/integrations/import-csv"
        return self._mapping(path, self._send("POST", path, json={'file_content': file_content}))

    def import_pms(self) -> Dict[str, Any]:
        path = "/integrations/import-pms"
        return self._mapping(path, self._send("POST", path))

    def list_integrations(self) -> Dict[str, Any]:
        result = self._mapping("/integrations/", self._get("/integrations/"))
        return self._mapping("/integrations/", result.get('integrations'))

    def connect_integration(self, integration_type: str, action: str = "connect",
                            config: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        payload: Dict[str, Any] = {'integration_type': integration_type, 'action': action}
        if config:
            payload['config'] = config
        path = "/integrations/connect"
        return self._mapping(path, self._send("POST", path, json=payload))

    # =========================================================================
    # Notifications & tasks
    # =========================================================================

    def list_notifications(self, unread_only: bool = True, limit: int = 20) -> List[Notification]:
        params = {'unread_only': "true" if unread_only else "false", 'limit': limit}
        return self._records("/notifications/", self._get("/notifications/", params), Notification)

    def mark_notification_read(self, notification_id: str) -> None:
        self._send("PATCH", f"/notifications/{notification_id}/read")

    def schedule_task(self, task_id: str, staff_id: str, scheduled_start: str,
                      scheduled_end: str, sync_to_calendar: Optional[str] = None) -> Any:
        return self._send("POST", f"/tasks/{task_id}/schedule", json={
            'task_id': task_id,
            'staff_id': staff_id,
            'scheduled_start': scheduled_start,
            'scheduled_end': scheduled_end,
            'sync_to_calendar': sync_to_calendar,
        })
