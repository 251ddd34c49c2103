#!/usr/bin/env python3
"""
╔══════════════════════════════════════════════════════════╗
║     Notification Preferences Service — Live Demo         ║
╚══════════════════════════════════════════════════════════╝

Run: python -m notification_prefs.demo
"""

from typing import List, Tuple

from notification_prefs.engine.decision import NotificationGate
from notification_prefs.engine.models import ValidationError
from notification_prefs.engine.store import InMemoryStore

CYAN  = "\033[96m"
GREEN = "\033[92m"
YELLOW= "\033[93m"
RED   = "\033[91m"
BOLD  = "\033[1m"
DIM   = "\033[2m"
RESET = "\033[0m"

SEED_PREFERENCES = {
    "usr_1": {"dnd": None, "eventSettings": {"item_shipped": {"enabled": False}}},
    "usr_2": {
        "dnd": {"start": "22:00", "end": "07:00"},
        "eventSettings": {"item_shipped": {"enabled": True}},
    },
    "usr_3": {"eventSettings": {"item_shipped": {"enabled": True}}},
}

SCENARIOS = [
    ("No preferences stored → fail-open", "usr_no_pref", "item_shipped", "2025-07-28T12:00:00Z"),
    ("usr_1 unsubscribed from item_shipped", "usr_1", "item_shipped", "2025-07-28T12:00:00Z"),
    ("usr_2 inside overnight DND (23:30)", "usr_2", "item_shipped", "2025-07-28T23:30:00Z"),
    ("usr_2 at DND start 22:00 (inclusive)", "usr_2", "item_shipped", "2025-07-28T22:00:00Z"),
    ("usr_2 at DND end 07:00 (exclusive)", "usr_2", "item_shipped", "2025-07-29T07:00:00Z"),
    ("usr_3 allow path", "usr_3", "item_shipped", "2025-07-28T12:00:00Z"),
    ("usr_3 event type not in settings", "usr_3", "another_event", "2025-07-28T12:00:00Z"),
    ("Impossible timestamp", "usr_3", "item_shipped", "2025-13-40T25:61:00Z"),
    ("Lowercase 'z' timestamp", "usr_3", "item_shipped", "2025-07-28T12:00:00z"),
]


def banner(text):
    print(f"\n{CYAN}{BOLD}{'─'*55}")
    print(f"  {text}")
    print(f"{'─'*55}{RESET}")


def seed(gate: NotificationGate):
    for user_id, body in SEED_PREFERENCES.items():
        result = gate.replace_preferences(user_id, body)
        if isinstance(result, ValidationError):
            raise ValueError(f"seed for {user_id} rejected: {result.to_dict()}")


def run_scenarios(gate: NotificationGate) -> List[Tuple[str, dict]]:
    outcomes = []
    for i, (label, user_id, event_type, timestamp) in enumerate(SCENARIOS, 1):
        result = gate.submit_event({
            "eventId": f"evt_{i}",
            "userId": user_id,
            "eventType": event_type,
            "timestamp": timestamp,
        })
        outcomes.append((label, result.to_dict()))
    return outcomes


def main():
    gate = NotificationGate(InMemoryStore())

    banner("Seeding preferences")
    seed(gate)
    for user_id in SEED_PREFERENCES:
        print(f"  {user_id}: {gate.get_preferences(user_id).to_dict()}")

    banner("Submitting events")
    for label, outcome in run_scenarios(gate):
        if "error" in outcome:
            icon, color = "⚠️ ", YELLOW
        elif outcome["decision"] == "DO_NOT_NOTIFY":
            icon, color = "🚫", RED
        else:
            icon, color = "✅", GREEN
        print(f"  {icon} {label}")
        print(f"     {color}→ {outcome}{RESET}")

    print(f"""
{GREEN}{BOLD}To run as an API server:{RESET}
  notification-prefs        (or: uvicorn notification_prefs.api.server:create_app --factory --port 3000)

Then test with curl:
  curl -X POST http://localhost:3000/preferences/usr_2 \\
    -H "Content-Type: application/json" \\
    -d '{{"dnd":{{"start":"22:00","end":"07:00"}},"eventSettings":{{"item_shipped":{{"enabled":true}}}}}}'

  curl -X POST http://localhost:3000/events \\
    -H "Content-Type: application/json" \\
    -d '{{"eventId":"e1","userId":"usr_2","eventType":"item_shipped","timestamp":"2025-07-28T23:30:00Z"}}'

{DIM}  curl http://localhost:3000/health{RESET}
""")


if __name__ == "__main__":
    main()
