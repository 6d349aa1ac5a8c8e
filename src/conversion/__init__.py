from .annotations import (
    KUBELET_COMPATIBILITY_ANNOTATION_KEY,
    NODE_CLASS_REFERENCE_ANNOTATION_KEY,
)
from .errors import (
    ConversionError,
    EncodingError,
    MalformedObjectError,
    MissingDefaultError,
)
from .nodepool import (
    V1_API_VERSION,
    V1BETA1_API_VERSION,
    convert_from,
    convert_from_legacy,
    convert_nodepool,
    convert_to,
    convert_to_legacy,
)
