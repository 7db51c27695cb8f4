import io
import time

import numpy as np
from PIL import Image


def make_png_bytes(w=400, h=300, color=(128, 64, 32)) -> bytes:
    arr = np.zeros((h, w, 3), dtype=np.uint8)
    arr[:, :] = color
    img = Image.fromarray(arr)
    buf = io.BytesIO()
    img.save(buf, format="PNG")
    return buf.getvalue()


def open_session(client, w=400, h=300) -> str:
    files = {"file": ("sample.png", make_png_bytes(w, h), "image/png")}
    r = client.post("/sessions", files=files)
    assert r.status_code == 201, r.text
    return r.json()["id"]


BOUNDS = {"left": 0, "top": 0, "width": 200, "height": 150}


def test_root_and_health(client):
    assert client.get("/").json()["service"] == "canvaslab-backend"
    assert client.get("/health").json() == {"status": "healthy"}


def test_open_session_and_download(client):
    sid = open_session(client)
    r = client.get(f"/sessions/{sid}")
    assert r.status_code == 200
    data = r.json()
    assert data["current"]["width"] == 400
    assert data["history"] == {"cursor": 0, "length": 1, "can_undo": False, "can_redo": False}

    r2 = client.get(f"/sessions/{sid}/current")
    assert r2.status_code == 200
    assert r2.headers["content-type"] == "image/png"


def test_upload_rejects_non_image(client):
    files = {"file": ("notes.txt", b"hello", "text/plain")}
    r = client.post("/sessions", files=files)
    assert r.status_code == 400


def test_unknown_session_is_404(client):
    assert client.get("/sessions/missing").status_code == 404
    assert client.post("/sessions/missing/history/undo").status_code == 404


def test_crop_flow_commits_at_native_resolution(client):
    sid = open_session(client)  # 400x300 source shown at 200x150
    r = client.post(f"/sessions/{sid}/crop/start", json={"bounds": BOUNDS})
    assert r.status_code == 200
    assert r.json()["region"] == {"x": 20.0, "y": 15.0, "width": 160.0, "height": 120.0}

    down = {"handle": "bottom-right", "event": {"client_x": 180, "client_y": 135}}
    assert client.post(f"/sessions/{sid}/crop/pointer/down", json=down).json()["dragging"]

    # a second grab while dragging is rejected
    again = {"handle": "left", "event": {"client_x": 20, "client_y": 50}}
    assert client.post(f"/sessions/{sid}/crop/pointer/down", json=again).status_code == 409

    move = {"event": {"client_x": 160, "client_y": 115}}
    r = client.post(f"/sessions/{sid}/crop/pointer/move", json=move)
    assert r.json()["region"] == {"x": 20.0, "y": 15.0, "width": 140.0, "height": 100.0}
    assert client.post(f"/sessions/{sid}/crop/pointer/up").json()["dragging"] is False

    r = client.post(f"/sessions/{sid}/crop/commit")
    assert r.status_code == 200, r.text
    data = r.json()
    assert data["cropping"] is False
    assert data["history"]["length"] == 2
    assert (data["current"]["width"], data["current"]["height"]) == (280, 200)


def test_commit_outside_cropping_mode_is_409(client):
    sid = open_session(client)
    assert client.post(f"/sessions/{sid}/crop/commit").status_code == 409


def test_start_without_bounds_is_noop(client):
    sid = open_session(client)
    r = client.post(f"/sessions/{sid}/crop/start", json={})
    assert r.status_code == 200
    assert r.json()["cropping"] is False


def test_aspect_lock_and_cancel(client):
    sid = open_session(client)
    client.post(f"/sessions/{sid}/crop/start", json={"bounds": BOUNDS})
    r = client.post(f"/sessions/{sid}/crop/aspect", json={"ratio": "1:1"})
    assert r.status_code == 200
    region = r.json()["region"]
    assert abs(region["width"] - region["height"]) < 1e-6
    assert r.json()["aspect"] == "1:1"

    assert client.post(f"/sessions/{sid}/crop/aspect", json={"ratio": "wide"}).status_code == 400

    r = client.post(f"/sessions/{sid}/crop/cancel")
    assert r.json() == {"cropping": False, "region": None, "aspect": None, "dragging": False, "handle": None}
    assert client.get(f"/sessions/{sid}/history").json()["state"]["length"] == 1


def test_undo_redo_report_changes(client):
    sid = open_session(client)
    r = client.post(f"/sessions/{sid}/history/undo")
    assert r.status_code == 200
    assert r.json()["changed"] is False

    r = client.post(f"/sessions/{sid}/transforms/pixelate", json={"params": {"block": 4}})
    assert r.status_code == 200, r.text
    assert r.json()["history"]["cursor"] == 1

    r = client.post(f"/sessions/{sid}/history/undo")
    assert r.json()["changed"] is True
    assert r.json()["state"]["can_redo"] is True
    r = client.post(f"/sessions/{sid}/history/redo")
    assert r.json()["current"]["annotation"] == "pixelate (block=4)"

    versions = client.get(f"/sessions/{sid}/history").json()["versions"]
    assert len(versions) == 2


def test_unknown_transform_is_400(client):
    sid = open_session(client)
    assert client.post(f"/sessions/{sid}/transforms/colorize").status_code == 400
    assert "pixelate" in client.get(f"/sessions/{sid}/transforms").json()["transforms"]


def test_adjustments_store_and_bake(client):
    sid = open_session(client)
    r = client.post(f"/sessions/{sid}/adjustments", json={"brightness": 40, "apply": False})
    assert r.json()["adjustments"]["brightness"] == 40
    assert r.json()["history"]["length"] == 1

    r = client.post(f"/sessions/{sid}/adjustments", json={"filter": "sepia"})
    assert r.status_code == 200
    assert r.json()["history"]["length"] == 2
    assert r.json()["adjustments"]["filter"] == "none"

    assert client.post(f"/sessions/{sid}/adjustments", json={}).status_code == 400
    assert client.post(f"/sessions/{sid}/adjustments", json={"blur": 50}).status_code == 422


def test_replace_artifact_and_close(client):
    sid = open_session(client)
    client.post(f"/sessions/{sid}/transforms/magic_erase")
    files = {"file": ("other.png", make_png_bytes(64, 64), "image/png")}
    r = client.post(f"/sessions/{sid}/artifact", files=files)
    assert r.json()["history"]["length"] == 1
    assert r.json()["current"]["width"] == 64

    assert client.delete(f"/sessions/{sid}").json()["ok"] is True
    assert client.get(f"/sessions/{sid}").status_code == 404


def test_generator_flow(client):
    gid = client.post("/generator").json()["id"]
    r = client.post(f"/generator/{gid}/generate", json={"prompt": "harbor", "count": 2})
    assert r.status_code == 200, r.text
    assert len(r.json()["images"]) == 2

    r = client.post(f"/generator/{gid}/outpaint", json={"index": 0, "direction": "top"})
    assert r.json()["history"]["length"] == 2
    assert r.json()["images"][0]["height"] == 384

    r = client.post(f"/generator/{gid}/undo")
    assert r.json()["history"]["cursor"] == 0
    assert client.get(f"/generator/{gid}/images/1").headers["content-type"] == "image/png"
    assert client.get(f"/generator/{gid}/images/5").status_code == 404


def test_generator_job_is_polled_into_history(client):
    gid = client.post("/generator").json()["id"]
    r = client.post(f"/generator/{gid}/jobs", json={"prompt": "storm clouds"})
    assert r.status_code == 202
    job_id = r.json()["job_id"]

    deadline = time.monotonic() + 5.0
    state = client.get(f"/generator/{gid}").json()
    while state["history"]["length"] == 0 and time.monotonic() < deadline:
        time.sleep(0.02)
        state = client.get(f"/generator/{gid}").json()
    assert state["history"]["length"] == 1
    assert state["jobs"][0]["job_id"] == job_id
    assert state["jobs"][0]["active"] is False

    # cancelling a finished job is reported, not an error
    assert client.delete(f"/generator/{gid}/jobs/{job_id}").status_code == 200
    assert client.delete(f"/generator/{gid}/jobs/unknown").status_code == 404


def test_template_flow(client):
    tid = client.post("/templates").json()["id"]
    assert client.get(f"/templates/{tid}/current").status_code == 404
    r = client.post(f"/templates/{tid}/generate", json={"prompt": "sale", "template_type": "banner"})
    assert r.json()["current"]["annotation"] == "banner: sale"
    assert r.json()["current"]["width"] == 320
    assert client.post(f"/templates/{tid}/undo").json()["history"]["cursor"] == 0


def test_audio_effects(client):
    effects = client.get("/audio/effects").json()["effects"]
    assert "radio" in effects
    r = client.get("/audio/effects/chipmunk", params={"speed": 1.0})
    assert r.json()["playback_rate"] == 1.7
    assert client.get("/audio/effects/echo").json()["delay"]["time"] == 0.3
    assert client.get("/audio/effects/vocoder").status_code == 404


def test_aspect_lock_rejects_non_finite_and_unfittable_ratios(client):
    sid = open_session(client)
    client.post(f"/sessions/{sid}/crop/start", json={"bounds": BOUNDS})
    before = client.get(f"/sessions/{sid}/crop").json()
    for ratio in ("inf:1", "nan:1", "1:0", "1000:1"):
        r = client.post(f"/sessions/{sid}/crop/aspect", json={"ratio": ratio})
        assert r.status_code == 400, ratio
    assert client.get(f"/sessions/{sid}/crop").json() == before


def test_transform_params_out_of_range_are_400(client):
    sid = open_session(client)
    assert client.post(f"/sessions/{sid}/transforms/upscale", json={"params": {"scale": 50}}).status_code == 400
    assert client.post(f"/sessions/{sid}/transforms/pixelate", json={"params": {"block": 0}}).status_code == 400
    assert client.get(f"/sessions/{sid}").json()["history"]["length"] == 1

    r = client.post(f"/sessions/{sid}/transforms/upscale", json={"params": {"scale": 2}})
    assert r.status_code == 200, r.text
    assert r.json()["current"]["width"] == 800


def test_download_resolution_presets(client):
    sid = open_session(client)  # 400x300
    r = client.get(f"/sessions/{sid}/current", params={"resolution": "480p"})
    assert r.status_code == 200
    with Image.open(io.BytesIO(r.content)) as img:
        assert img.size == (640, 480)
    assert r.headers["content-disposition"] == 'attachment; filename="edited-image-480p.png"'

    assert client.get(f"/sessions/{sid}/current", params={"resolution": "4k"}).status_code == 422


def test_close_generator_and_template_sessions(client):
    gid = client.post("/generator").json()["id"]
    job_id = client.post(f"/generator/{gid}/jobs", json={"prompt": "rain"}).json()["job_id"]
    assert client.delete(f"/generator/{gid}").json()["ok"] is True
    assert client.get(f"/generator/{gid}").status_code == 404
    assert client.delete(f"/generator/{gid}/jobs/{job_id}").status_code == 404
    assert client.delete(f"/generator/{gid}").status_code == 404

    tid = client.post("/templates").json()["id"]
    assert client.delete(f"/templates/{tid}").json()["ok"] is True
    assert client.get(f"/templates/{tid}").status_code == 404
    assert client.delete(f"/templates/{tid}").status_code == 404
