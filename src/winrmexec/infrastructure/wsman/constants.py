# pylint: disable=line-too-long
"""
WS-Management wire constants.

Action and resource URIs must match what Windows expects byte-for-byte.
"""

# Namespaces declared on every envelope root
NAMESPACES = {
    "s": "http://www.w3.org/2003/05/soap-envelope",
    "wsa": "http://schemas.xmlsoap.org/ws/2004/08/addressing",
    "wsman": "http://schemas.dmtf.org/wbem/wsman/1/wsman.xsd",
    "p": "http://schemas.microsoft.com/wbem/wsman/1/wsman.xsd",
    "rsp": "http://schemas.microsoft.com/wbem/wsman/1/windows/shell",
}

# Actions
ACTION_CREATE = "http://schemas.xmlsoap.org/ws/2004/09/transfer/Create"
ACTION_COMMAND = "http://schemas.microsoft.com/wbem/wsman/1/windows/shell/Command"
ACTION_RECEIVE = "http://schemas.microsoft.com/wbem/wsman/1/windows/shell/Receive"
ACTION_DELETE = "http://schemas.xmlsoap.org/ws/2004/09/transfer/Delete"

RESOURCE_URI_CMD = "http://schemas.microsoft.com/wbem/wsman/1/windows/shell/cmd"
ANONYMOUS_ADDRESS = "http://schemas.xmlsoap.org/ws/2004/08/addressing/role/anonymous"

# The HTTP layer decides the real target; this is only a placeholder
TO_ADDRESS = "http://windows-host:5985/wsman"

MAX_ENVELOPE_SIZE = 153600
OPERATION_TIMEOUT_SECONDS = 60
LOCALE = "en-US"

CONTENT_TYPE = "application/soap+xml;charset=UTF-8"
