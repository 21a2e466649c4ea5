"""Core constants: auth scopes and action log literals."""

# Bearer token scopes required by the write endpoints
SCOPE_FILES_WRITE = "files:write"
SCOPE_FILES_DELETE = "files:delete"

# Action log
ACTION_FILE_DOWNLOAD = "file_download"
RESOURCE_TYPE_FILE = "file"

# Accepted values for the ?source= query parameter on downloads
DOWNLOAD_SOURCES = frozenset({"admin-web", "public-web"})
