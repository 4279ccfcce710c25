"""
OpenShiftClient — REST implementation of the event source and enricher.

Talks to the Kubernetes/OpenShift API server with httpx: lists a
resource collection to learn its current resourceVersion, then opens a
chunked `?watch=true` stream that carries one JSON watch event per line.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import TYPE_CHECKING, Any, AsyncIterator, Optional

import httpx

from buildnotify.cluster.models import Build, ClusterEvent, ResourceList, WatchEvent
from buildnotify.cluster.source import Enricher, EventSource, WatchStream

if TYPE_CHECKING:
    from buildnotify.core import ClusterConfig

logger = logging.getLogger(__name__)

SERVICE_ACCOUNT_DIR = Path("/var/run/secrets/kubernetes.io/serviceaccount")
BUILD_POD_ANNOTATION = "openshift.io/build.pod-name"
BUILD_CONFIG_LABEL = "openshift.io/build-config.name"

_BUILD_API = "/apis/build.openshift.io/v1"
_CORE_API = "/api/v1"

# resource name or short name → (api prefix, plural)
_RESOURCES: dict[str, tuple[str, str]] = {
    "build": (_BUILD_API, "builds"),
    "builds": (_BUILD_API, "builds"),
    "buildconfig": (_BUILD_API, "buildconfigs"),
    "buildconfigs": (_BUILD_API, "buildconfigs"),
    "bc": (_BUILD_API, "buildconfigs"),
    "pod": (_CORE_API, "pods"),
    "pods": (_CORE_API, "pods"),
    "po": (_CORE_API, "pods"),
}


def collection_path(
    resource_type: str, namespace: Optional[str], all_namespaces: bool = False
) -> Optional[str]:
    """API path of a resource collection, or None if the type is unknown."""
    api = _RESOURCES.get(resource_type.strip().lower())
    if api is None:
        return None
    prefix, plural = api
    if all_namespaces or not namespace:
        return f"{prefix}/{plural}"
    return f"{prefix}/namespaces/{namespace}/{plural}"


class HttpWatchStream(WatchStream):
    """Watch stream backed by a streaming httpx response."""

    def __init__(self, response: httpx.Response, path: str) -> None:
        self._response = response
        self._path = path

    async def __aiter__(self) -> AsyncIterator[WatchEvent]:
        try:
            async for line in self._response.aiter_lines():
                if not line.strip():
                    continue
                try:
                    event = WatchEvent.model_validate_json(line)
                except ValueError as exc:
                    # ValidationError included; ending the stream sends the watch back to listing
                    logger.warning("Unable to decode an event from the watch stream on %s: %s", self._path, exc)
                    return
                yield event
        except (httpx.ReadTimeout, httpx.RemoteProtocolError, httpx.ReadError) as exc:
            # the API server drops idle watches; treat like a normal close
            logger.debug("Watch stream on %s interrupted: %s", self._path, exc)
        finally:
            await self._response.aclose()

    async def aclose(self) -> None:
        await self._response.aclose()


class OpenShiftClient(EventSource, Enricher):
    """Async REST client for builds, pods and events."""

    def __init__(
        self,
        server: str,
        *,
        token: str = "",
        namespace: str = "",
        verify_tls: bool | str = True,
        public_url: str = "",
        log_tail_lines: int = 50,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.server = server.rstrip("/")
        self.token = token
        self.namespace = namespace
        self.verify_tls = verify_tls
        self.log_tail_lines = log_tail_lines
        self.timeout = timeout
        self._public_url = public_url.rstrip("/")
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    @classmethod
    def from_config(cls, config: ClusterConfig) -> OpenShiftClient:
        """Build a client from the cluster section, falling back to in-cluster settings."""
        server = config.server
        token = config.token
        verify: bool | str = config.verify_tls

        host = os.getenv("KUBERNETES_SERVICE_HOST")
        if not server and host:
            port = os.getenv("KUBERNETES_SERVICE_PORT", "443")
            server = f"https://{host}:{port}"
            ca_file = SERVICE_ACCOUNT_DIR / "ca.crt"
            if config.verify_tls and ca_file.exists():
                verify = str(ca_file)
        if not token:
            token_file = SERVICE_ACCOUNT_DIR / "token"
            if token_file.exists():
                token = token_file.read_text().strip()

        return cls(
            server or "https://localhost:8443",
            token=token,
            namespace=config.namespace,
            verify_tls=verify,
            public_url=config.public_url,
            log_tail_lines=config.log_tail_lines,
        )

    async def connect(self) -> None:
        self._client = self._new_client()

    async def disconnect(self) -> None:
        if self._client:
            await self._client.aclose()
            self._client = None

    def _new_client(self) -> httpx.AsyncClient:
        headers = {"Accept": "application/json"}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        return httpx.AsyncClient(
            base_url=self.server,
            headers=headers,
            verify=self.verify_tls,
            timeout=self.timeout,
            transport=self._transport,
        )

    @property
    def http(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = self._new_client()
        return self._client

    async def _get_json(self, path: str, **params: Any) -> dict[str, Any]:
        resp = await self.http.get(path, params=params or None)
        resp.raise_for_status()
        return resp.json()

    # ------------------------------------------------------------------
    # EventSource
    # ------------------------------------------------------------------

    async def default_namespace(self) -> str:
        if self.namespace:
            return self.namespace
        ns_file = SERVICE_ACCOUNT_DIR / "namespace"
        if ns_file.exists():
            return ns_file.read_text().strip()
        return "default"

    async def list_collections(
        self,
        resource_type: str,
        namespace: Optional[str],
        all_namespaces: bool = False,
    ) -> list[ResourceList]:
        collections: list[ResourceList] = []
        for name in resource_type.split(","):
            if not name.strip():
                continue
            path = collection_path(name, namespace, all_namespaces)
            if path is None:
                logger.warning("Unknown resource type %r", name)
                continue
            data = await self._get_json(path, limit=1)
            collections.append(
                ResourceList(
                    resource_type=name.strip().lower(),
                    path=path,
                    namespace=None if all_namespaces else namespace,
                    resource_version=data.get("metadata", {}).get("resourceVersion", ""),
                )
            )
        return collections

    async def watch(self, collection: ResourceList, resource_version: str) -> WatchStream:
        request = self.http.build_request(
            "GET",
            collection.path,
            params={"watch": "true", "resourceVersion": resource_version},
            timeout=httpx.Timeout(self.timeout, read=None),
        )
        response = await self.http.send(request, stream=True)
        try:
            response.raise_for_status()
        except httpx.HTTPStatusError:
            await response.aclose()
            raise
        return HttpWatchStream(response, collection.path)

    # ------------------------------------------------------------------
    # Enricher
    # ------------------------------------------------------------------

    async def build_logs(self, build: Build) -> str:
        meta = build.metadata
        resp = await self.http.get(
            f"{_BUILD_API}/namespaces/{meta.namespace}/builds/{meta.name}/log",
            params={"tailLines": self.log_tail_lines},
        )
        resp.raise_for_status()
        return resp.text

    async def build_events(self, build: Build) -> list[str]:
        meta = build.metadata
        selectors = [
            f"involvedObject.kind=Build,involvedObject.name={meta.name}",
            f"involvedObject.kind=Pod,involvedObject.name={build_pod_name(build)}",
        ]
        events: list[ClusterEvent] = []
        for selector in selectors:
            data = await self._get_json(
                f"{_CORE_API}/namespaces/{meta.namespace}/events",
                fieldSelector=selector,
            )
            events.extend(ClusterEvent.model_validate(item) for item in data.get("items") or [])
        events.sort(key=lambda ev: (ev.last_timestamp is not None, ev.last_timestamp))
        return [ev.describe() for ev in events]

    async def build_node_name(self, build: Build) -> str:
        meta = build.metadata
        pod = await self._get_json(
            f"{_CORE_API}/namespaces/{meta.namespace}/pods/{build_pod_name(build)}"
        )
        return pod.get("spec", {}).get("nodeName", "")

    async def console_url(self, build: Build) -> str:
        base = await self.public_url()
        meta = build.metadata
        config_name = build_config_name(build)
        if config_name:
            return f"{base}/console/project/{meta.namespace}/browse/builds/{config_name}/{meta.name}"
        return f"{base}/console/project/{meta.namespace}/browse/builds/{meta.name}"

    async def public_url(self) -> str:
        """Public master URL, as advertised by the swagger API.

        Falls back to the configured server when the swagger document
        can't be fetched or decoded.
        """
        if self._public_url:
            return self._public_url
        try:
            data = await self._get_json("/swaggerapi/api/v1")
            base = str(data.get("basePath") or "").rstrip("/")
        except (httpx.HTTPError, ValueError) as exc:
            logger.warning("Failed to get the public URL from the swagger API: %s", exc)
            base = ""
        self._public_url = base or self.server
        return self._public_url


def build_pod_name(build: Build) -> str:
    return build.metadata.annotations.get(BUILD_POD_ANNOTATION) or f"{build.metadata.name}-build"


def build_config_name(build: Build) -> str:
    if build.status.config and build.status.config.name:
        return build.status.config.name
    return build.metadata.labels.get(BUILD_CONFIG_LABEL, "")
