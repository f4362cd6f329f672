# Identifiers for the onboarding service (one service, one char, one descriptor)
UUID_BASE = "1234"
UUID_SUFFIX = "-0000-1000-8000-00805f9b34fb"

SERVICE_HANDLE = "1000"
COMM_CHAR_HANDLE = "2000"
DESCR_HANDLE = "3000"

APP_NAME = "snapd onboarding"
DESCR_STRING = "Communication for snapd onboarding"

DEFAULT_INTERFACE = "hci0"
CLIENT_PEER_ADDRESS = "B8:27:EB:6F:C1:30"


def make_uuid(handle: str, base: str = UUID_BASE, suffix: str = UUID_SUFFIX) -> str:
    return base + handle + suffix


SERVICE_UUID = make_uuid(SERVICE_HANDLE)
COMM_CHAR_UUID = make_uuid(COMM_CHAR_HANDLE)
DESCR_UUID = make_uuid(DESCR_HANDLE)


def descriptor_payload(count: int) -> bytes:
    return f"{DESCR_STRING} read: {count}".encode("utf-8")
