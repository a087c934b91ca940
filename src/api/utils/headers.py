"""Entity alert headers attached to CRUD responses.

Successful writes announce ``<app>.<entity>.<action>`` with the entity ID as
parameter; client errors announce ``error.<key>`` with the entity name.
"""

from src.api.constants import (
    ALERT_APPLICATION_NAME,
    ALERT_ERROR_HEADER,
    ALERT_HEADER,
    ALERT_PARAMS_HEADER,
)


def create_alert(message: str, param: str) -> dict[str, str]:
    """Build the alert headers for an arbitrary message."""
    return {ALERT_HEADER: message, ALERT_PARAMS_HEADER: param}


def create_entity_creation_alert(entity_name: str, param: str) -> dict[str, str]:
    return create_alert(f"{ALERT_APPLICATION_NAME}.{entity_name}.created", param)


def create_entity_update_alert(entity_name: str, param: str) -> dict[str, str]:
    return create_alert(f"{ALERT_APPLICATION_NAME}.{entity_name}.updated", param)


def create_entity_deletion_alert(entity_name: str, param: str) -> dict[str, str]:
    return create_alert(f"{ALERT_APPLICATION_NAME}.{entity_name}.deleted", param)


def create_failure_alert(entity_name: str, error_key: str) -> dict[str, str]:
    """Build the headers describing a rejected request on an entity."""
    return {
        ALERT_ERROR_HEADER: f"error.{error_key}",
        ALERT_PARAMS_HEADER: entity_name,
    }
