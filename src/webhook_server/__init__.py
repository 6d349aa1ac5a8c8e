from .conversion_review import review_conversion
from .service_mode_server import ServiceModeWebhookServer
