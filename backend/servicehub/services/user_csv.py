import csv
import io
from datetime import date, datetime
from typing import Any, Dict, Iterable, List, Optional

from servicehub.models import User

EXPORT_HEADERS = ["full_name", "email", "phone", "role", "is_approved", "location", "created_at"]
IMPORT_DEFAULT_PASSWORD = "imported123"
VALID_ROLES = {"admin", "provider", "client"}

SAMPLE_CSV = (
    "full_name,email,phone,role,is_approved,location,bio\n"
    "John Doe,john@example.com,+1234567890,client,true,New York,Sample client user\n"
    "Jane Smith,jane@example.com,+1234567891,provider,false,Los Angeles,Professional hair stylist\n"
    "Admin User,admin@example.com,+1234567892,admin,true,San Francisco,System administrator\n"
)


def parse_users_csv(csv_text: str) -> List[Dict[str, Any]]:
    """Parse a user import file into raw user dicts.

    The first non-blank line is the header row. Rows missing a name or an
    email are dropped, unknown roles fall back to ``client`` and every row
    gets the default import password.
    """
    lines = [line for line in csv_text.splitlines() if line.strip()]
    if len(lines) < 2:
        return []

    reader = csv.reader(lines, skipinitialspace=True)
    headers = [header.strip() for header in next(reader)]
    rows: List[Dict[str, Any]] = []
    for values in reader:
        row: Dict[str, Any] = {}
        for index, header in enumerate(headers):
            value = values[index].strip() if index < len(values) else ""
            key = header.lower()
            if key in {"full_name", "name"}:
                row["full_name"] = value
            elif key == "email":
                row["email"] = value
            elif key == "phone":
                row["phone"] = value
            elif key == "role":
                row["role"] = value.lower() if value.lower() in VALID_ROLES else "client"
            elif key in {"is_approved", "approved"}:
                row["is_approved"] = value.lower() == "true" or value == "1"
            elif key == "bio":
                row["bio"] = value
            elif key == "location":
                row["location"] = value
            else:
                row[header] = value
        row.setdefault("role", "client")
        row.setdefault("is_approved", False)
        row["password"] = IMPORT_DEFAULT_PASSWORD
        if row.get("full_name") and row.get("email"):
            rows.append(row)
    return rows


def _cell(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, datetime):
        return value.isoformat().replace("+00:00", "Z")
    return str(value)


def export_users_csv(users: Iterable[User]) -> str:
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(EXPORT_HEADERS)
    for user in users:
        record = user.model_dump()
        writer.writerow([_cell(record.get(header)) for header in EXPORT_HEADERS])
    return buffer.getvalue()


def export_filename(today: Optional[date] = None) -> str:
    day = today or date.today()
    return f"users_export_{day.isoformat()}.csv"
