import logging
from typing import Sequence

from conversion import ConversionError, convert_nodepool

logger = logging.getLogger(__name__)

_CONVERTERS = {
    "NodePool": convert_nodepool,
}


def review_conversion(review: dict, node_classes: Sequence) -> dict:
    """Answer a ConversionReview request.

    A single failed object fails the whole review, so the API server rejects
    the read or write instead of persisting a partially converted list.
    """
    req = review["request"]
    desired = req["desiredAPIVersion"]
    response = {"uid": req["uid"]}

    converted = []
    try:
        for obj in req.get("objects") or []:
            fn = _CONVERTERS.get(obj.get("kind", ""))
            if fn is None:
                obj["apiVersion"] = desired
                converted.append(obj)
            else:
                converted.append(fn(obj, desired, node_classes))
    except ConversionError as e:
        logger.error(f"Conversion to {desired} failed: {e}")
        response["result"] = {"status": "Failure", "message": str(e)}
    else:
        response["result"] = {"status": "Success"}
        response["convertedObjects"] = converted

    return {
        "apiVersion": review.get("apiVersion", "apiextensions.k8s.io/v1"),
        "kind": "ConversionReview",
        "response": response,
    }
