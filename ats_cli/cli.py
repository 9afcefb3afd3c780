"""
ats-cli — command line client for the Agent Task Service
"""

import sys
import traceback

from ats_cli import config
from ats_cli.args import tokenize
from ats_cli.commands import (
    cmd_cancel,
    cmd_claim,
    cmd_complete,
    cmd_create,
    cmd_fail,
    cmd_get,
    cmd_health,
    cmd_list,
    cmd_message_add,
    cmd_message_list,
    cmd_reject,
    cmd_repo_create,
    cmd_repo_current,
    cmd_repo_init,
    cmd_repo_list,
    cmd_repo_rename,
    cmd_repo_show,
    cmd_repo_switch,
    cmd_stats,
    cmd_update,
    cmd_watch,
)
from ats_cli.dispatch import dispatch
from ats_cli.exceptions import CliError

HELP_TEXT = f"""\
ATS CLI - Agent Task Service Command Line Interface v{config.VERSION}

USAGE:
  ats <command> [options]

TASK COMMANDS:
  create <title>             Create a new task
    --type <type>            Task type (default: task)
    --channel <channel>      Task channel (default: default)
    --priority <1-10>        Priority level (default: 5)
    --description <text>     Task description
    --payload <json>         Task payload as JSON

  get <id>                   Get task details
  list                       List pending tasks (default)
    --all                    Show all tasks (not just pending)
    --status <status>        Filter by status
    --type <type>            Filter by type
    --channel <channel>      Filter by channel
    --assignee <id>          Filter by assignee
    --priority <spec>        Priority: 8 (exact), 7+ (minimum), 5-8 (range)
    --since <time>           Created after: 30m, 4h, 1d, 2w, 3M, today,
                             yesterday, YYYY-MM-DD or ISO timestamp
    --until <time>           Created before (same formats as --since)
    --updated-since <time>   Updated after (same formats as --since)
    --sort <field>           Sort by: created, updated, priority, title
    --order <asc|desc>       Sort direction
    --limit <n>              Limit results
    --offset <n>             Skip results

  update <id>                Update a task
    --title <title>          New title
    --description <text>     New description
    --priority <1-10>        New priority
    --status <status>        New status

  claim <id>                 Claim a task
    --lease <ms>             Lease duration in milliseconds
  complete <id>              Mark task as complete
    --outputs <json>         Task outputs as JSON
  cancel <id>                Cancel a task
  fail <id>                  Mark task as failed
    --reason <text>          Failure reason
  reject <id>                Reject a task
    --reason <text>          Rejection reason

REPOSITORY COMMANDS:
  repo init [org/project]    Bind current directory to a repository
    --force                  Overwrite existing config
    --no-verify              Skip verification
  repo list                  List all repositories (flattened org/project view)
  repo create <org/project>  Create a new repository
    --name <name>            Project name
    --description <text>     Project description
  repo rename <org/project> [new-org/new-project]
                             Rename org and/or project
    --slug <slug>            New project slug only
    --name <name>            New display name
  repo switch <org/project>  Switch default repository
  repo current               Show current repository binding
  repo show                  Show full config with sources

OTHER COMMANDS:
  health                     Check service health
  stats                      Show task statistics overview
  watch                      Watch for real-time events
    --channel <channel>      Filter by channel
    --type <type>            Filter by task type
    --events <types>         Comma-separated event types

  message add <task_id> <content>   Add a message to a task
    --type <type>            Content type (default: text)
  message list <task_id>     List messages for a task

GLOBAL OPTIONS:
  --url, -u <url>            Service URL (default: {config.DEFAULT_BASE_URL})
  --org <slug>               Override default organization
  --project <slug>           Override default project
  --format, -f <format>      Output format: table, json (default: table)
  --actor-type <type>        Actor type: human, agent, system
  --actor-id <id>            Actor ID
  --actor-name <name>        Actor display name
  --verbose, -v              Verbose output
  --help, -h                 Show this help
  --version                  Show version number

  Option values that start with "-" are read as flags. Use the --key=value
  form to pass them, e.g. --limit=-5.

CONFIGURATION:
  Global config: ~/.ats/config
  Project config: .ats/config (walks up directory tree)

  Example config:
  {{
    "organization": "default",
    "project": "main",
    "url": "{config.DEFAULT_BASE_URL}"
  }}

  Priority: CLI flags > environment variables > project config > global config > defaults

  Project-level config binds a directory to an ATS repository, similar to
  how .git binds a directory to a git repository. Use "ats repo init" to
  bind the current directory to a repository.

ENVIRONMENT VARIABLES:
  ATS_URL                    Service URL
  ATS_ORG                    Default organization
  ATS_PROJECT                Default project
  ATS_ACTOR_TYPE             Default actor type
  ATS_ACTOR_ID               Default actor ID
  ATS_ACTOR_NAME             Default actor name
  ATS_HTTP_TIMEOUT_SECONDS   HTTP timeout (default: 30)
  ATS_HTTP_LOG               Log HTTP requests to stderr (1/true/yes/on)

EXAMPLES:
  ats list                                  # Show pending tasks
  ats list --all --since 1d --priority 7+   # High-priority tasks from today-ish
  ats create "Review PR #123" --priority 8  # Create a task
  ats get 42                                # View task details
  ats claim 42                              # Claim a task
  ats complete 42                           # Mark complete
  ats message add 42 "On it"                # Add a comment
  ats watch --channel support               # Watch events

  ats repo list                             # List all repositories
  ats repo switch myorg/myproject           # Switch to a repository
  ats repo init myorg/myproject             # Bind current dir to a repo
"""


# ---------------------------------------------------------------------------
# Command registry
# ---------------------------------------------------------------------------


def build_registry():
    """Command name -> handler, or -> {subcommand: handler} for families."""
    return {
        "health": cmd_health,
        "stats": cmd_stats,
        "create": cmd_create,
        "get": cmd_get,
        "list": cmd_list,
        "update": cmd_update,
        "claim": cmd_claim,
        "complete": cmd_complete,
        "cancel": cmd_cancel,
        "fail": cmd_fail,
        "reject": cmd_reject,
        "watch": cmd_watch,
        "message": {
            "add": cmd_message_add,
            "list": cmd_message_list,
        },
        "repo": {
            "init": cmd_repo_init,
            "list": cmd_repo_list,
            "create": cmd_repo_create,
            "rename": cmd_repo_rename,
            "switch": cmd_repo_switch,
            "current": cmd_repo_current,
            "show": cmd_repo_show,
        },
    }


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------


def main(argv=None):
    if hasattr(sys.stdout, "reconfigure"):
        sys.stdout.reconfigure(encoding="utf-8", errors="replace")

    invocation = tokenize(sys.argv[1:] if argv is None else argv)

    if invocation.flag("help", "h") or invocation.command == "help":
        print(HELP_TEXT)
        sys.exit(0)

    if invocation.flag("version") or invocation.command == "version":
        print(f"ats-cli v{config.VERSION}")
        sys.exit(0)

    if not invocation.command:
        print(HELP_TEXT)
        sys.exit(1)

    verbose = invocation.flag("verbose", "v")
    try:
        cfg = config.resolve_config(invocation.merged_options())
        dispatch(invocation, cfg, build_registry())
    except CliError as e:
        print(str(e), file=sys.stderr)
        if verbose:
            traceback.print_exc()
        sys.exit(e.exit_code)


if __name__ == "__main__":
    main()
