from ppc_keyword_research.config import backend_env
from ppc_keyword_research.data_access import check_backend_status
from ppc_keyword_research.errors import TransportError
import json


def verify_backend():
    env = backend_env()

    print(f"Checking backend at: {env['api_base_url']}")
    print(
        f"Checking credentials: {'Set' if env['login'] and env['password'] else 'MISSING (backend defaults)'}"
    )

    try:
        status = check_backend_status(env["api_base_url"])
    except TransportError as e:
        print(f"\n❌ Error: {e.message}")
    else:
        print("\n✅ Backend reachable:\n")
        print(json.dumps(status, indent=2))


if __name__ == "__main__":
    verify_backend()
