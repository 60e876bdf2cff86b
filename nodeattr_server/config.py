# Configuration settings should be set in app.config
# get_config falls back to the NodeattrServer class variables and the environment
import os
import logging
from flask import current_app
import nodeattr_server
from typing import Optional, Union


def get_config(option: str) -> Optional[Union[bool, str]]:
    """Retrieve a configuration parameter from the app
    :param option: configuration parameter
    :return: configuration value
    :rtype: string
    """
    try:
        result = current_app.config[option]
    except (KeyError, RuntimeError):
        # KeyError: not set on the app, RuntimeError: no app context
        result = getattr(nodeattr_server.NodeattrServer, option, os.environ.get(option, None))
    return result


def is_debug() -> bool:
    """
    We use the loglevel to check whether we're running in debug mode
    :return: whether the app is in debug mode
    :rtype: Boolean
    """
    return nodeattr_server.log.getEffectiveLevel() < logging.INFO
