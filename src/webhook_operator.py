import kopf
import logging
import os
from node_classes import load_node_classes
from webhook_server import ServiceModeWebhookServer

# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

# Configure webhook server
webhook_host = os.getenv("WEBHOOK_HOST", "0.0.0.0")
webhook_port = 443
webhook_cert_path = "/etc/webhook/tls.crt"
webhook_key_path = "/etc/webhook/tls.key"
webhook_ca_path = "/etc/webhook/ca.crt"

# Service configuration for webhook
service_namespace = os.getenv("SERVICE_NAMESPACE", "karpenter")
service_name = os.getenv("SERVICE_NAME", "karpenter-conversion-webhook")


@kopf.on.startup()
def configure_webhook(settings: kopf.OperatorSettings, *args, **kwargs):
    """
    Configure the conversion webhook server on operator startup.

    The default node classes are loaded here, once, and handed to the server;
    a malformed node classes file stops the operator from starting.
    """
    logger.info("Configuring conversion webhook server")
    node_classes = load_node_classes()

    if not (os.path.exists(webhook_cert_path) and os.path.exists(webhook_key_path)):
        logger.error(
            "Webhook certificates not found. NodePool conversion will not be served."
        )
        if not os.path.exists(webhook_cert_path):
            logger.error(f"Certificate file not found: {webhook_cert_path}")
        if not os.path.exists(webhook_key_path):
            logger.error(f"Key file not found: {webhook_key_path}")
        return

    logger.info(
        f"Found webhook certificates at {webhook_cert_path} and {webhook_key_path}"
    )
    settings.admission.server = ServiceModeWebhookServer(
        addr=webhook_host,
        port=webhook_port,
        certfile=webhook_cert_path,
        pkeyfile=webhook_key_path,
        cafile=webhook_ca_path,
        service_name=service_name,
        service_namespace=service_namespace,
        node_classes=node_classes,
    )  # type: ignore
    # The NodePool CRD's spec.conversion points at this Service.
    logger.info(f"Webhook server listening on {webhook_host}:{webhook_port}")
