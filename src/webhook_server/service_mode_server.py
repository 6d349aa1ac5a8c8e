"""
Conversion webhook server for NodePools.

The server extends Kopf's WebhookServer but yields a service configuration
instead of a URL configuration, so the API server reaches it through the
in-cluster Service, and it answers CRD ConversionReview requests on /convert.
"""

import asyncio
import base64
import logging

import aiohttp.web
import kopf

from .conversion_review import review_conversion

logger = logging.getLogger(__name__)


class ServiceModeWebhookServer(kopf.WebhookServer):
    """
    A webhook server that converts NodePools between karpenter.sh versions.

    Kubernetes routes requests through the Service named by ``service_name`` in
    ``service_namespace``; the ``addr`` and ``host`` parameters of the parent
    WebhookServer only affect where the server binds, not the advertised
    client configuration.

    ``node_classes`` is the default node class registry used when converting
    v1beta1 NodePools whose nodeClassRef omits kind or apiVersion. It is read
    once at startup and never modified by the server.
    """

    def __init__(
        self,
        *,
        service_name,
        service_namespace,
        node_classes=(),
        addr=None,
        port=None,
        path=None,
        host=None,
        cadata=None,
        cafile=None,
        cadump=None,
        context=None,
        insecure=False,
        certfile=None,
        pkeyfile=None,
        password=None,
        extra_sans=(),
        verify_mode=None,
        verify_cafile=None,
        verify_capath=None,
        verify_cadata=None,
    ):
        super().__init__(
            addr=addr,
            port=port,
            path=path,
            host=host,
            cadata=cadata,
            cafile=cafile,
            cadump=cadump,
            context=context,
            insecure=insecure,
            certfile=certfile,
            pkeyfile=pkeyfile,
            password=password,
            extra_sans=extra_sans,
            verify_mode=verify_mode,
            verify_cafile=verify_cafile,
            verify_capath=verify_capath,
            verify_cadata=verify_cadata,
        )
        self.service_name = service_name
        self.service_namespace = service_namespace
        self.node_classes = tuple(node_classes)

    async def __call__(self, fn):
        """
        Start the webhook server and yield a service configuration.

        Args:
            fn: The admission function Kopf calls for /{id} requests.

        Yields:
            dict: The client configuration for the webhook, pointing at the
            Service rather than a URL, with the CA bundle when TLS is used.
        """
        cadata, context = self._build_ssl()
        path = self.path.rstrip("/") if self.path else ""

        app = self._setup_app(fn, path)
        runner = self._setup_runner(app)
        await runner.setup()

        try:
            addr = self.addr or None
            port = self.port or self._allocate_free_port()
            site = self._setup_site(runner, addr, port, context)
            await site.start()

            schema = "http" if context is None else "https"
            listen_url = self._build_url(schema, addr or "*", port, self.path or "")
            logger.debug(f"Listening for webhooks at {listen_url}")

            client_config = {
                "service": {
                    "namespace": self.service_namespace,
                    "name": self.service_name,
                    "path": path,
                    "port": port,
                }
            }
            if cadata is not None:
                client_config["caBundle"] = base64.b64encode(cadata).decode("ascii")

            logger.info(
                f"Serving conversion webhook via service {self.service_name}.{self.service_namespace}"
            )
            yield client_config
            await asyncio.Event().wait()
        finally:
            await runner.cleanup()

    def _setup_app(self, fn, path):
        """Set up the web application with admission and conversion endpoints."""

        async def _serve_fn(request):
            return await self._serve(fn, request)

        async def _conversion_fn(request):
            return await self._handle_conversion(request)

        app = aiohttp.web.Application()
        app.add_routes([
            aiohttp.web.post("/convert", _conversion_fn),
            aiohttp.web.post(f"{path}/{{id:.*}}", _serve_fn),
        ])
        return app

    async def _handle_conversion(self, request: aiohttp.web.Request) -> aiohttp.web.Response:
        """Handle CRD conversion webhook requests."""
        try:
            review = await request.json()
        except ValueError as e:
            raise aiohttp.web.HTTPBadRequest(text=f"Malformed ConversionReview: {e}")
        return aiohttp.web.json_response(review_conversion(review, self.node_classes))

    def _setup_runner(self, app):
        return aiohttp.web.AppRunner(app, handle_signals=False)

    def _setup_site(self, runner, addr, port, context):
        return aiohttp.web.TCPSite(
            runner, addr, port, ssl_context=context, reuse_port=True
        )
