"""Amazing Marvin tool catalog.

Each entry maps a tool name and input schema onto one Marvin API endpoint.
The catalog is built once at import time and shared read-only by every
connection; credentials are bound later by the router.
"""

import time
from typing import Any
from urllib.parse import quote

from shared.models import HTTPMethod, OutboundCall, RequestBuilder, TokenTier, ToolDefinition
from shared.schema import create_tool_schema

DATE_PATTERN = r"^\d{4}-\d{2}-\d{2}$"


# Request builders

def post(path: str, **fixed: Any) -> RequestBuilder:
    """POST the validated arguments as the JSON body, plus fixed fields."""
    def build(args: dict[str, Any]) -> OutboundCall:
        return OutboundCall(method=HTTPMethod.POST, path=path, json_body={**args, **fixed})
    return build


def get(path: str) -> RequestBuilder:
    """GET with the validated arguments as the query string."""
    def build(args: dict[str, Any]) -> OutboundCall:
        return OutboundCall(method=HTTPMethod.GET, path=path, params=args or None)
    return build


def delete_reminder(args: dict[str, Any]) -> OutboundCall:
    reminder_id = quote(args["reminderId"], safe="")
    return OutboundCall(method=HTTPMethod.DELETE, path=f"/reminders/{reminder_id}")


SETTER_FIELDS = ("key", "val")


def update_doc(args: dict[str, Any]) -> OutboundCall:
    # each setter carries only its key and value
    setters = [
        {field: setter[field] for field in SETTER_FIELDS if field in setter}
        for setter in args["setters"]
    ]
    body = {"itemId": args["itemId"], "setters": setters}
    return OutboundCall(method=HTTPMethod.POST, path="/doc/update", json_body=body)


def create_doc(args: dict[str, Any]) -> OutboundCall:
    # createdAt is milliseconds since the epoch
    body = {**args["doc"], "createdAt": int(time.time() * 1000)}
    return OutboundCall(method=HTTPMethod.POST, path="/doc/create", json_body=body)


# Parameter helpers

def string(name: str, description: str, optional: bool = False, **extra: Any) -> dict[str, Any]:
    return {"name": name, "type": "string", "description": description, "optional": optional, **extra}


def number(name: str, description: str, optional: bool = False) -> dict[str, Any]:
    return {"name": name, "type": "number", "description": description, "optional": optional}


def date(name: str, description: str) -> dict[str, Any]:
    """Optional YYYY-MM-DD field."""
    return string(name, description, optional=True, pattern=DATE_PATTERN)


def string_list(name: str, description: str, optional: bool = False) -> dict[str, Any]:
    return {
        "name": name,
        "type": "array",
        "description": description,
        "items": {"type": "string"},
        "optional": optional,
    }


def item_fields(kind: str) -> list[dict[str, Any]]:
    """Fields shared by task and project creation."""
    return [
        string("title", f"The title of the {kind}."),
        date("day", f"The day the {kind} is scheduled for (YYYY-MM-DD)."),
        string("parentId", "The ID of the parent project or category.", optional=True),
        string_list("labelIds", "An array of label IDs.", optional=True),
        date("dueDate", f"The due date of the {kind} (YYYY-MM-DD)."),
        number("timeEstimate", "The estimated time in milliseconds.", optional=True),
        string("note", f"A note for the {kind}.", optional=True),
    ]


def tool(
    name: str,
    description: str,
    build: RequestBuilder,
    parameters: list[dict[str, Any]] | None = None,
    tier: TokenTier = TokenTier.API
) -> ToolDefinition:
    return ToolDefinition(
        name=name,
        description=description,
        input_schema=create_tool_schema(parameters or []),
        tier=tier,
        build_request=build,
    )


CATALOG: tuple[ToolDefinition, ...] = (
    # Tasks and projects
    tool("createTask", "Creates a new task in Amazing Marvin.", post("/addTask"), item_fields("task")),
    tool(
        "markTaskDone",
        "Marks a task as done.",
        post("/markDone"),
        [string("itemId", "The ID of the task to mark as done.")],
    ),
    tool("createProject", "Creates a new project.", post("/addProject"), item_fields("project")),

    # Scheduling
    tool(
        "getTodayItems",
        "Gets tasks and projects scheduled for today.",
        get("/todayItems"),
        [date("date", "The date to get items for (YYYY-MM-DD). Defaults to today.")],
    ),
    tool(
        "getDueItems",
        "Gets open tasks and projects that are due.",
        get("/dueItems"),
        [date("by", "The date to get due items by (YYYY-MM-DD). Defaults to today.")],
    ),
    tool(
        "getTodayTimeBlocks",
        "Gets a list of today's time blocks.",
        get("/todayTimeBlocks"),
        [date("date", "The date to get time blocks for (YYYY-MM-DD). Defaults to today.")],
    ),
    tool(
        "addEvent",
        "Creates a new event.",
        post("/addEvent"),
        [
            string("title", "The title of the event."),
            string("start", "The start time of the event in ISO format.", format="date-time"),
            number("length", "The length of the event in milliseconds.", optional=True),
            string("note", "A note for the event.", optional=True),
        ],
    ),

    # Taxonomy
    tool("getCategories", "Gets a list of all categories.", get("/categories")),
    tool("getLabels", "Gets a list of all labels.", get("/labels")),
    tool(
        "getChildren",
        "Gets child tasks and projects of a category or project.",
        get("/children"),
        [string("parentId", "The ID of the parent category or project to get children for.")],
    ),

    # Time tracking
    tool(
        "startTracking",
        "Starts time tracking for a task.",
        post("/track", action="START"),
        [string("taskId", "The ID of the task to start or stop tracking.")],
    ),
    tool(
        "stopTracking",
        "Stops time tracking for a task.",
        post("/track", action="STOP"),
        [string("taskId", "The ID of the task to start or stop tracking.")],
    ),
    tool("getTrackedItem", "Gets the currently tracked task.", get("/trackedItem")),
    tool(
        "getTracks",
        "Gets time tracking info for tasks.",
        post("/tracks"),
        [string_list("taskIds", "An array of task IDs to get time tracking info for.")],
    ),

    # Reminders
    tool("getReminders", "Gets a list of all reminders.", get("/reminders")),
    tool(
        "setReminder",
        "Sets a reminder for a task.",
        post("/reminders"),
        [
            string("itemId", "The ID of the task to set a reminder for."),
            number("remindAt", "The unix timestamp (in milliseconds) to set the reminder for."),
        ],
    ),
    tool(
        "deleteReminder",
        "Deletes a reminder.",
        delete_reminder,
        [string("reminderId", "The ID of the reminder to delete.")],
    ),
    tool(
        "deleteAllReminders",
        "Deletes all reminders.",
        post("/reminder/deleteAll"),
        tier=TokenTier.FULL_ACCESS,
    ),

    # Habits
    tool(
        "recordHabit",
        "Records a habit.",
        post("/updateHabit", updateDB=True),
        [
            string("habitId", "The ID of the habit to record."),
            number("value", "The value to record for the habit.", optional=True),
        ],
    ),
    tool(
        "undoHabit",
        "Undoes the last recording of a habit.",
        post("/updateHabit", undo=True, updateDB=True),
        [string("habitId", "The ID of the habit to undo.")],
    ),
    tool(
        "getHabit",
        "Gets a habit by ID.",
        get("/habit"),
        [string("id", "The ID of the habit to retrieve.")],
    ),
    tool("listHabits", "Gets a list of all habits.", get("/habits")),

    # Account and goals
    tool("getMe", "Gets information about your account.", get("/me")),
    tool("getGoals", "Gets a list of all goals.", get("/goals")),
    tool("getKudos", "Gets Marvin Kudos info.", get("/kudos")),

    # Reward points
    tool(
        "claimRewardPoints",
        "Claims reward points.",
        post("/claimRewardPoints", op="CLAIM"),
        [
            number("points", "The number of points to claim."),
            string("itemId", 'The ID of the item to claim points for, or "MANUAL".'),
            date("date", "The date to claim points for (YYYY-MM-DD)."),
        ],
    ),
    tool(
        "unclaimRewardPoints",
        "Unclaims reward points.",
        post("/unclaimRewardPoints", op="UNCLAIM"),
        [
            string("itemId", "The ID of the item to unclaim points for."),
            date("date", "The date to unclaim points for (YYYY-MM-DD)."),
        ],
    ),
    tool(
        "spendRewardPoints",
        "Spends reward points.",
        post("/spendRewardPoints", op="SPEND"),
        [
            number("points", "The number of points to spend."),
            date("date", "The date to spend points for (YYYY-MM-DD)."),
        ],
    ),
    tool(
        "resetRewardPoints",
        "Resets reward points.",
        post("/resetRewardPoints"),
        tier=TokenTier.FULL_ACCESS,
    ),

    # Arbitrary documents
    tool(
        "updateDoc",
        "Updates any document. Use with caution.",
        update_doc,
        [
            string("itemId", "The ID of the document to update."),
            {
                "name": "setters",
                "type": "array",
                "description": "An array of key-value pairs to update.",
                "items": {
                    "type": "object",
                    "properties": {"key": {"type": "string"}, "val": {}},
                    "required": ["key"],
                },
            },
        ],
        tier=TokenTier.FULL_ACCESS,
    ),
    tool(
        "createDoc",
        "Creates any document. Use with caution.",
        create_doc,
        [
            {
                "name": "doc",
                "type": "object",
                "description": "The document to create. Must include `db` field.",
                "properties": {"db": {"type": "string"}},
                "required": ["db"],
            },
        ],
        tier=TokenTier.FULL_ACCESS,
    ),
    tool(
        "deleteDoc",
        "Deletes any document. Use with caution.",
        post("/doc/delete"),
        [string("itemId", "The ID of the document to delete.")],
        tier=TokenTier.FULL_ACCESS,
    ),
)
