from enum import Enum

class ErrorCode(str, Enum):
    """
    Canonical error codes for the public ``{"error": {"code": ...}}`` envelope.

    Families (status is decided by the raiser, not the code):
      * ``*_REQUIRED`` / ``INVALID_*`` / ``*_MISMATCH`` / ``NO_UPDATABLE_FIELDS`` – 400
      * ``UNAUTHORIZED`` – 401, ``FORBIDDEN_COMPANY_ID`` – 403
      * ``*_NOT_FOUND`` – 404 (also used for cross-tenant resources)
      * ``*_FETCH_FAILED`` / ``*_CREATE_FAILED`` / ``*_UPDATE_FAILED`` /
        ``*_DELETE_FAILED`` – 502 on transport errors, upstream status otherwise
      * ``*_SERVICE_URL_NOT_CONFIGURED`` – 500
    """
    # authn / authz
    UNAUTHORIZED                        = "UNAUTHORIZED"
    FORBIDDEN_COMPANY_ID                = "FORBIDDEN_COMPANY_ID"

    # configuration
    FLOW_MANAGER_SERVICE_URL_NOT_CONFIGURED = "FLOW_MANAGER_SERVICE_URL_NOT_CONFIGURED"

    # identity
    COMPANY_NUMBER_REQUIRED             = "COMPANY_NUMBER_REQUIRED"
    COMPANY_ID_NOT_FOUND                = "COMPANY_ID_NOT_FOUND"
    COMPANIES_FETCH_FAILED              = "COMPANIES_FETCH_FAILED"
    INVALID_COMPANY_ID                  = "INVALID_COMPANY_ID"

    # input validation
    INVALID_BODY                        = "INVALID_BODY"
    NO_UPDATABLE_FIELDS                 = "NO_UPDATABLE_FIELDS"
    PROMPT_REQUIRED                     = "PROMPT_REQUIRED"
    LABEL_REQUIRED                      = "LABEL_REQUIRED"
    OPERATOR_REQUIRED                   = "OPERATOR_REQUIRED"
    NAME_REQUIRED                       = "NAME_REQUIRED"
    TYPE_REQUIRED                       = "TYPE_REQUIRED"
    INVALID_PRIORITY                    = "INVALID_PRIORITY"
    INVALID_UPDATED_AT                  = "INVALID_UPDATED_AT"
    NODE_ID_REQUIRED                    = "NODE_ID_REQUIRED"
    INVALID_NODE_ID                     = "INVALID_NODE_ID"
    SOURCE_NODE_ID_REQUIRED             = "SOURCE_NODE_ID_REQUIRED"
    INVALID_SOURCE_NODE_ID              = "INVALID_SOURCE_NODE_ID"
    INVALID_DESTINATION_NODE_ID         = "INVALID_DESTINATION_NODE_ID"
    EDGE_ID_REQUIRED                    = "EDGE_ID_REQUIRED"
    INVALID_EDGE_ID                     = "INVALID_EDGE_ID"
    CONDITION_ID_REQUIRED               = "CONDITION_ID_REQUIRED"
    INVALID_CONDITION_ID                = "INVALID_CONDITION_ID"
    PROPERTY_ID_REQUIRED                = "PROPERTY_ID_REQUIRED"
    INVALID_PROPERTY_ID                 = "INVALID_PROPERTY_ID"
    CONDITION_PROPERTY_ID_REQUIRED      = "CONDITION_PROPERTY_ID_REQUIRED"
    INVALID_CONDITION_PROPERTY_ID       = "INVALID_CONDITION_PROPERTY_ID"
    EDGE_ID_MISMATCH                    = "EDGE_ID_MISMATCH"
    CONDITION_ID_MISMATCH               = "CONDITION_ID_MISMATCH"
    NODE_ID_MISMATCH                    = "NODE_ID_MISMATCH"
    INVALID_TRIGGER_NODE_ID             = "INVALID_TRIGGER_NODE_ID"
    NOTIFICATION_ID_REQUIRED            = "NOTIFICATION_ID_REQUIRED"
    INVALID_NOTIFICATION_ID             = "INVALID_NOTIFICATION_ID"
    RECIPIENT_ID_REQUIRED               = "RECIPIENT_ID_REQUIRED"
    INVALID_RECIPIENT_ID                = "INVALID_RECIPIENT_ID"

    # ownership chain
    NODE_NOT_FOUND                      = "NODE_NOT_FOUND"
    EDGE_NOT_FOUND                      = "EDGE_NOT_FOUND"
    CONDITION_NOT_FOUND                 = "CONDITION_NOT_FOUND"
    PROPERTY_NOT_FOUND                  = "PROPERTY_NOT_FOUND"
    NOTIFICATION_NOT_FOUND              = "NOTIFICATION_NOT_FOUND"
    RECIPIENT_NOT_FOUND                 = "RECIPIENT_NOT_FOUND"
    CONDITION_PROPERTY_MISMATCH         = "CONDITION_PROPERTY_MISMATCH"

    # upstream operations
    NODES_FETCH_FAILED                  = "NODES_FETCH_FAILED"
    NODES_CREATE_FAILED                 = "NODES_CREATE_FAILED"
    NODES_UPDATE_FAILED                 = "NODES_UPDATE_FAILED"
    NODES_DELETE_FAILED                 = "NODES_DELETE_FAILED"
    EDGES_FETCH_FAILED                  = "EDGES_FETCH_FAILED"
    EDGES_CREATE_FAILED                 = "EDGES_CREATE_FAILED"
    EDGES_UPDATE_FAILED                 = "EDGES_UPDATE_FAILED"
    EDGES_DELETE_FAILED                 = "EDGES_DELETE_FAILED"
    CONDITIONS_FETCH_FAILED             = "CONDITIONS_FETCH_FAILED"
    CONDITION_FETCH_FAILED              = "CONDITION_FETCH_FAILED"
    CONDITIONS_CREATE_FAILED            = "CONDITIONS_CREATE_FAILED"
    CONDITIONS_UPDATE_FAILED            = "CONDITIONS_UPDATE_FAILED"
    CONDITIONS_DELETE_FAILED            = "CONDITIONS_DELETE_FAILED"
    PROPERTIES_FETCH_FAILED             = "PROPERTIES_FETCH_FAILED"
    PROPERTIES_CREATE_FAILED            = "PROPERTIES_CREATE_FAILED"
    PROPERTIES_UPDATE_FAILED            = "PROPERTIES_UPDATE_FAILED"
    PROPERTIES_DELETE_FAILED            = "PROPERTIES_DELETE_FAILED"
    NODE_PROPERTIES_FETCH_FAILED        = "NODE_PROPERTIES_FETCH_FAILED"
    NODE_PROPERTIES_CREATE_FAILED       = "NODE_PROPERTIES_CREATE_FAILED"
    NODE_PROPERTIES_DELETE_FAILED       = "NODE_PROPERTIES_DELETE_FAILED"
    CONDITION_PROPERTIES_FETCH_FAILED   = "CONDITION_PROPERTIES_FETCH_FAILED"
    CONDITION_PROPERTIES_CREATE_FAILED  = "CONDITION_PROPERTIES_CREATE_FAILED"
    CONDITION_PROPERTIES_UPDATE_FAILED  = "CONDITION_PROPERTIES_UPDATE_FAILED"
    CONDITION_PROPERTIES_DELETE_FAILED  = "CONDITION_PROPERTIES_DELETE_FAILED"
    NOTIFICATIONS_FETCH_FAILED          = "NOTIFICATIONS_FETCH_FAILED"
    NOTIFICATION_CREATE_FAILED          = "NOTIFICATION_CREATE_FAILED"
    NOTIFICATION_DELETE_FAILED          = "NOTIFICATION_DELETE_FAILED"
    NOTIFICATION_RECIPIENTS_FETCH_FAILED = "NOTIFICATION_RECIPIENTS_FETCH_FAILED"
    NOTIFICATION_RECIPIENT_CREATE_FAILED = "NOTIFICATION_RECIPIENT_CREATE_FAILED"
    NOTIFICATION_RECIPIENT_DELETE_FAILED = "NOTIFICATION_RECIPIENT_DELETE_FAILED"

    # framework level
    NOT_FOUND                           = "NOT_FOUND"
    METHOD_NOT_ALLOWED                  = "METHOD_NOT_ALLOWED"
    VALIDATION_FAILED                   = "VALIDATION_FAILED"
    RATE_LIMITED                        = "RATE_LIMITED"
    INTERNAL                            = "INTERNAL"

__all__ = ["ErrorCode"]
