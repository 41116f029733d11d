import io

from conftest import image_bytes, make_image


def _upload(client, data, filename="image.png", **form):
    payload = {"image": (io.BytesIO(data), filename)}
    payload.update(form)
    return client.post("/api/upload", data=payload, content_type="multipart/form-data")


def test_healthz_sets_security_headers(client):
    response = client.get("/healthz")

    assert response.status_code == 200
    assert response.get_json() == {"status": "ok"}
    assert response.headers["X-Frame-Options"] == "DENY"
    assert response.headers["X-Content-Type-Options"] == "nosniff"


def test_upload_returns_palette(client):
    data = image_bytes(make_image([(255, 0, 0), (0, 0, 255)]))
    response = _upload(client, data, color_count="2")
    body = response.get_json()

    assert response.status_code == 200
    assert body["success"] is True
    assert sorted(body["palette"]) == ["#0000ff", "#ff0000"]
    assert sorted(body["colors"]) == [[0, 0, 255], [255, 0, 0]]


def test_upload_uses_default_color_count(app, client):
    data = image_bytes(make_image([(10, 10, 10), (200, 200, 200)], size=(30, 30)), "JPEG")
    response = _upload(client, data, filename="photo.jpg")

    assert response.status_code == 200
    assert len(response.get_json()["palette"]) == app.config["DEFAULT_COLOR_COUNT"]


def test_upload_clamps_color_count(app, client):
    data = image_bytes(make_image([(255, 0, 0), (0, 0, 255)]))
    response = _upload(client, data, color_count="100")

    assert response.status_code == 200
    assert len(response.get_json()["palette"]) == app.config["MAX_COLOR_COUNT"]


def test_upload_without_file(client):
    response = client.post("/api/upload", data={}, content_type="multipart/form-data")

    assert response.status_code == 400
    assert response.get_json()["success"] is False


def test_upload_rejects_extension(client):
    data = image_bytes(make_image([(1, 2, 3)]))
    assert _upload(client, data, filename="image.gif").status_code == 400


def test_upload_rejects_non_image(client):
    response = _upload(client, b"definitely not an image", filename="image.png")

    assert response.status_code == 400
    assert response.get_json()["error"] == "Файл не является корректным изображением"


def test_upload_rejects_disallowed_format(client):
    data = image_bytes(make_image([(1, 2, 3)]), "GIF")
    response = _upload(client, data, filename="image.png")

    assert response.status_code == 400
    assert response.get_json()["error"] == "Недопустимый формат изображения"


def test_cluster_endpoint(client):
    samples = [[255, 0, 0], [0, 255, 0], [0, 0, 255]]
    response = client.post("/api/cluster", json={"k": 3, "samples": samples})
    body = response.get_json()

    assert response.status_code == 200
    assert sorted(body["centroids"]) == sorted(samples)
    assert sorted(body["palette"]) == ["#0000ff", "#00ff00", "#ff0000"]


def test_cluster_endpoint_accepts_hex_samples(client):
    response = client.post("/api/cluster", json={"k": 1, "samples": ["#000000", "#FFFFFF"]})
    assert response.get_json()["centroids"] == [[128, 128, 128]]


def test_cluster_endpoint_handles_degenerate_input(client):
    response = client.post("/api/cluster", json={"k": 3, "samples": [[5, 5, 5], [5, 5, 5]]})
    assert response.get_json()["centroids"] == [[5, 5, 5]] * 3


def test_cluster_endpoint_rejects_invalid_input(client):
    cases = [
        {"k": 0, "samples": [[1, 2, 3]]},
        {"k": True, "samples": [[1, 2, 3]]},
        {"k": 16, "samples": [[1, 2, 3]]},
        {"k": 1, "samples": []},
        {"k": 1, "samples": [[1, 2]]},
        {"k": 1, "samples": [[300, 0, 0]]},
        {"k": 1, "samples": [[2**70, 0, 0]]},
        {"k": 1, "samples": ["#zzzzzz"]},
        {"k": 1, "samples": "nope"},
    ]
    for payload in cases:
        response = client.post("/api/cluster", json=payload)
        assert response.status_code == 400, payload
        assert response.get_json()["success"] is False


def test_cluster_endpoint_requires_json_object(client):
    response = client.post("/api/cluster", data="[1, 2, 3]", content_type="application/json")
    assert response.status_code == 400


def test_palette_command(app, tmp_path):
    path = tmp_path / "stripes.png"
    make_image([(255, 0, 0), (0, 0, 255)]).save(path)

    result = app.test_cli_runner().invoke(args=["palette", str(path), "--colors", "2", "--seed", "3"])

    assert result.exit_code == 0
    # логи приложения могут попасть в тот же вывод
    lines = [line for line in result.output.splitlines() if line.startswith(f"{path}: ")]
    assert len(lines) == 1
    assert sorted(lines[0].split(": ", 1)[1].split()) == ["#0000ff", "#ff0000"]


def test_palette_command_rejects_bad_color_count(app, tmp_path):
    path = tmp_path / "stripes.png"
    make_image([(255, 0, 0)]).save(path)

    result = app.test_cli_runner().invoke(args=["palette", str(path), "--colors", "0"])
    assert result.exit_code != 0
