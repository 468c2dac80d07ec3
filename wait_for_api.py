import os, time

from modernband.services.backend_client import BackendError, client_from_settings

client = client_from_settings()
timeout_s = int(os.getenv("API_WAIT_TIMEOUT", "60"))
start = time.time()
last_err = None

print(f"[wait_for_api] Waiting for booking backend at {client.cfg.base_url} (timeout={timeout_s}s)")
while True:
    try:
        client.check_health()
        print("[wait_for_api] Booking backend is ready.")
        break
    except BackendError as e:
        last_err = e
        if time.time() - start > timeout_s:
            print(f"[wait_for_api] Timed out waiting for backend. Last error: {last_err}")
            raise
        time.sleep(1)
