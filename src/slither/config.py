"""
Tracking parameters for Slither.

Parameters travel through the tracker as a plain dictionary with upper-case
keys. Worm size limits depend on microscope zoom and camera resolution, so
they are meant to be tuned per rig through a JSON file.
"""

import json
import logging

logger = logging.getLogger(__name__)

DEFAULT_PARAMS = {
    # Candidate filter
    "MIN_VERTICES": 6,
    "MIN_WORM_AREA": 400.0,  # px^2
    "MAX_WORM_AREA": 1000.0,  # px^2
    "REJECT_EDGE_CONTOURS": False,
    # Contour extraction
    "THRESHOLD": 100,
    "INVERT_THRESHOLD": True,
    "MAX_CONTOURS": 500,
    # Frame preparation
    "BRIGHTNESS": 0.0,
    "CONTRAST": 1.0,
    "GAMMA": 1.0,
    # Lifecycle: None keeps every worm for the whole run
    "MAX_MISSED_FRAMES": None,
    # Analysis loop speed, percent of full speed (0 pauses)
    "THROTTLE": 100,
}


def validate_parameters(params):
    """
    Check a parameter dictionary for values the tracker cannot work with.

    Args:
        params (dict): Parameters to check

    Raises:
        ValueError: On the first invalid value found
    """
    if int(params["MIN_VERTICES"]) < 3:
        raise ValueError(f"MIN_VERTICES must be at least 3, got {params['MIN_VERTICES']}")
    if params["MIN_WORM_AREA"] < 0:
        raise ValueError(f"MIN_WORM_AREA must be non-negative, got {params['MIN_WORM_AREA']}")
    if params["MAX_WORM_AREA"] < params["MIN_WORM_AREA"]:
        raise ValueError(
            f"MAX_WORM_AREA ({params['MAX_WORM_AREA']}) is below MIN_WORM_AREA ({params['MIN_WORM_AREA']})"
        )
    if not 0 <= params["THRESHOLD"] <= 255:
        raise ValueError(f"THRESHOLD must be within 0-255, got {params['THRESHOLD']}")
    if not 0 <= params["THROTTLE"] <= 100:
        raise ValueError(f"THROTTLE must be within 0-100, got {params['THROTTLE']}")
    missed = params["MAX_MISSED_FRAMES"]
    if missed is not None and int(missed) < 1:
        raise ValueError(f"MAX_MISSED_FRAMES must be a positive integer or null, got {missed}")


def make_parameters(overrides=None):
    """
    Merge overrides over the defaults and validate the result.

    Args:
        overrides (dict, optional): Parameters that differ from DEFAULT_PARAMS

    Returns:
        dict: Complete parameter dictionary

    Raises:
        ValueError: If a key is unknown or a value is invalid
    """
    params = dict(DEFAULT_PARAMS)
    if overrides:
        unknown = sorted(set(overrides) - set(DEFAULT_PARAMS))
        if unknown:
            raise ValueError(f"Unknown tracking parameters: {', '.join(unknown)}")
        params.update(overrides)
    validate_parameters(params)
    return params


def load_parameters(path):
    """
    Load tracking parameters from a JSON file.

    Args:
        path (str): Path to a JSON object of parameter overrides

    Returns:
        dict: Complete, validated parameter dictionary
    """
    with open(path, "r", encoding="utf-8") as f:
        overrides = json.load(f)
    if not isinstance(overrides, dict):
        raise ValueError(f"Parameter file {path} must contain a JSON object")
    logger.info(f"Loaded {len(overrides)} tracking parameters from {path}")
    return make_parameters(overrides)
