"""files-api: upload, download and delete files backed by an object store and Postgres."""
