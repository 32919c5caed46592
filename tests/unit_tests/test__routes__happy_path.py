import re
from urllib.parse import quote

from fastapi import status
from fastapi.testclient import TestClient

from file_manager.routers.files import content_disposition

# Constants for testing
TEST_FILE_NAME = "notes.txt"
TEST_FILE_CONTENT = b"n" * 500
TEST_FILE_CONTENT_TYPE = "text/plain"
TEST_PDF_NAME = "invoice.pdf"
TEST_PDF_CONTENT = b"%PDF-1.4\n1 0 obj\n<<>>\nendobj\ntrailer\n<</Root 1 0 R>>\n%%EOF"
TEST_PDF_CONTENT_TYPE = "application/pdf"


def upload(client: TestClient, name: str, content: bytes, content_type: str):
    return client.post("/api/upload", files={"file": (name, content, content_type)})


def test_index__serves_landing_page(client: TestClient):
    response = client.get("/")

    assert response.status_code == status.HTTP_200_OK
    assert response.headers["content-type"].startswith("text/html")
    assert "File Manager" in response.text


def test_upload_file__happy_path(client: TestClient):
    response = upload(client, TEST_FILE_NAME, TEST_FILE_CONTENT, TEST_FILE_CONTENT_TYPE)

    assert response.status_code == status.HTTP_200_OK
    data = response.json()
    assert data["success"] is True
    assert data["message"] == "File uploaded successfully"
    assert re.fullmatch(r"\d+-notes\.txt", data["fileName"])
    assert data["originalName"] == TEST_FILE_NAME
    assert data["size"] == 500
    assert data["contentType"] == TEST_FILE_CONTENT_TYPE


def test_list_files(client: TestClient):
    file_name = upload(client, TEST_PDF_NAME, TEST_PDF_CONTENT, TEST_PDF_CONTENT_TYPE).json()["fileName"]

    response = client.get("/api/files")

    assert response.status_code == status.HTTP_200_OK
    data = response.json()
    assert data["success"] is True
    assert len(data["files"]) == 1
    entry = data["files"][0]
    assert entry["name"] == file_name
    assert entry["originalName"] == TEST_PDF_NAME
    assert entry["size"] == len(TEST_PDF_CONTENT)
    assert entry["contentType"] == TEST_PDF_CONTENT_TYPE
    assert "lastModified" in entry
    assert entry["url"] == f"/api/download/{quote(file_name, safe='')}"


def test_list_files__empty_bucket(client: TestClient):
    response = client.get("/api/files")

    assert response.status_code == status.HTTP_200_OK
    assert response.json() == {"success": True, "files": []}


def test_download_file(client: TestClient):
    file_name = upload(client, TEST_PDF_NAME, TEST_PDF_CONTENT, TEST_PDF_CONTENT_TYPE).json()["fileName"]

    response = client.get(f"/api/download/{file_name}")

    assert response.status_code == status.HTTP_200_OK
    assert response.content == TEST_PDF_CONTENT
    assert response.headers["content-disposition"] == f'attachment; filename="{file_name}"'
    assert response.headers["content-type"] == TEST_PDF_CONTENT_TYPE
    assert response.headers["content-length"] == str(len(TEST_PDF_CONTENT))


def test_download_file__via_listed_url(client: TestClient):
    upload(client, "quarterly report #1.pdf", TEST_PDF_CONTENT, TEST_PDF_CONTENT_TYPE)
    url = client.get("/api/files").json()["files"][0]["url"]

    response = client.get(url)

    assert response.status_code == status.HTTP_200_OK
    assert response.content == TEST_PDF_CONTENT


def test_download_file__non_ascii_name(client: TestClient):
    file_name = upload(client, "résumé.pdf", TEST_PDF_CONTENT, TEST_PDF_CONTENT_TYPE).json()["fileName"]

    response = client.get(f"/api/download/{quote(file_name)}")

    assert response.status_code == status.HTTP_200_OK
    disposition = response.headers["content-disposition"]
    assert disposition.startswith("attachment; filename=")
    assert f"filename*=UTF-8''{quote(file_name, safe='')}" in disposition


def test_delete_file(client: TestClient):
    file_name = upload(client, TEST_FILE_NAME, TEST_FILE_CONTENT, TEST_FILE_CONTENT_TYPE).json()["fileName"]

    response = client.delete(f"/api/files/{file_name}")

    assert response.status_code == status.HTTP_200_OK
    assert response.json() == {"success": True, "message": "File deleted successfully"}


def test_notes_lifecycle(client: TestClient):
    # upload
    response = upload(client, TEST_FILE_NAME, TEST_FILE_CONTENT, TEST_FILE_CONTENT_TYPE)
    assert response.status_code == status.HTTP_200_OK
    assert response.json()["size"] == 500
    file_name = response.json()["fileName"]

    # list
    files = client.get("/api/files").json()["files"]
    assert [f["originalName"] for f in files] == [TEST_FILE_NAME]

    # download
    response = client.get(f"/api/download/{file_name}")
    assert response.content == TEST_FILE_CONTENT

    # delete
    assert client.delete(f"/api/files/{file_name}").status_code == status.HTTP_200_OK

    # the file should not be found if it was deleted
    assert client.get("/api/files").json()["files"] == []
    response = client.get(f"/api/download/{file_name}")
    assert response.status_code == status.HTTP_404_NOT_FOUND
    assert response.json() == {"success": False, "error": "File not found"}


def test_health(client: TestClient):
    response = client.get("/health")

    assert response.status_code == status.HTTP_200_OK
    assert response.json()["status"] == "ok"
    assert response.json()["components"]["storage"] == "ready"


def test_content_disposition__quote_in_key():
    key = '1700000000000-say "hi".txt'

    header = content_disposition(key)

    assert header == (
        "attachment; filename=\"1700000000000-say 'hi'.txt\"; "
        f"filename*=UTF-8''{quote(key, safe='')}"
    )


def test_upload_file__drops_client_directory(client: TestClient):
    response = upload(client, "dir/notes.txt", TEST_FILE_CONTENT, TEST_FILE_CONTENT_TYPE)

    assert response.status_code == status.HTTP_200_OK
    data = response.json()
    assert re.fullmatch(r"\d+-notes\.txt", data["fileName"])
    assert data["originalName"] == TEST_FILE_NAME
    [entry] = client.get("/api/files").json()["files"]
    assert entry["name"] == data["fileName"]
