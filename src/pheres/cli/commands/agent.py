"""
Agent commands, talking to a running API server.
"""

import sys
from pathlib import Path

from rich import print_json

from pheres.cli import client
from pheres.cli.commands.program import read_file


def add_subparser(subparsers):
    parser = subparsers.add_parser("agent", help="Agents hosted by the API server")
    agent_sub = parser.add_subparsers(dest="agent_command", required=True)

    # create
    create_p = agent_sub.add_parser("create", help="Create an agent from an .asl file")
    create_p.add_argument("file", help="Path to .asl file")
    create_p.add_argument("--name", help="Agent name (defaults to the file name)")
    create_p.add_argument("--lenient", action="store_true", help="Skip bad clauses instead of stopping")
    create_p.set_defaults(func=agent_create)

    # list
    list_p = agent_sub.add_parser("list", help="List agents")
    list_p.set_defaults(func=agent_list)

    # show
    show_p = agent_sub.add_parser("show", help="Show an agent as JSON")
    show_p.add_argument("agent_id", help="Agent ID")
    show_p.set_defaults(func=agent_show)

    # event
    event_p = agent_sub.add_parser("event", help="Post a goal or belief change and run the agent")
    event_p.add_argument("agent_id", help="Agent ID")
    event_p.add_argument("literal", help="Goal or belief, e.g. 'sort'")
    kind = event_p.add_mutually_exclusive_group()
    kind.add_argument("--add", dest="kind", action="store_const", const="add", help="Add a belief")
    kind.add_argument("--remove", dest="kind", action="store_const", const="remove", help="Remove beliefs")
    event_p.add_argument("--max-cycles", type=int, default=None, help="Stop after N events")
    event_p.set_defaults(func=agent_event, kind="achieve")

    # query
    query_p = agent_sub.add_parser("query", help="Query an agent's beliefs")
    query_p.add_argument("agent_id", help="Agent ID")
    query_p.add_argument("query", help="Query, e.g. 'top(Disc, Pin)'")
    query_p.set_defaults(func=agent_query)

    # delete
    delete_p = agent_sub.add_parser("delete", help="Delete an agent")
    delete_p.add_argument("agent_id", help="Agent ID")
    delete_p.set_defaults(func=agent_delete)


def _print_output(lines: list[str]):
    for line in lines:
        print(f"  | {line}")


def agent_create(args):
    try:
        source = read_file(args.file)
        result = client.create_agent(args.name or Path(args.file).stem, source, args.lenient)
        print(f"✓ Created agent: {result['id']}")
        print(f"  name: {result['name']}")
        print(f"  {result['belief_count']} beliefs, {result['plan_count']} plans")
        for error in result.get("errors", []):
            print(f"  ✗ skipped: {error}")
        _print_output(result.get("output", []))
    except Exception as e:
        print(f"✗ Error: {e}")
        sys.exit(1)


def agent_list(args):
    try:
        agents = client.list_agents()
        if not agents:
            print("No agents.")
            return
        for a in agents:
            print(f"{a['id']}  {a['name']:20} {a['belief_count']} beliefs, {a['plan_count']} plans")
    except Exception as e:
        print(f"✗ Error: {e}")
        sys.exit(1)


def agent_show(args):
    try:
        print_json(data=client.get_agent(args.agent_id))
    except Exception as e:
        print(f"✗ Error: {e}")
        sys.exit(1)


def agent_event(args):
    try:
        result = client.post_event(args.agent_id, args.kind, args.literal, args.max_cycles)
        print(f"✓ Handled {result['handled']} events ({result['pending']} pending)")
        _print_output(result["output"])
    except Exception as e:
        print(f"✗ Error: {e}")
        sys.exit(1)


def agent_query(args):
    try:
        result = client.query_agent(args.agent_id, args.query)
        if not result["solutions"]:
            print("false.")
        for solution in result["solutions"]:
            print(", ".join(f"{k}={v}" for k, v in solution.items()) or "true.")
    except Exception as e:
        print(f"✗ Error: {e}")
        sys.exit(1)


def agent_delete(args):
    try:
        result = client.delete_agent(args.agent_id)
        print(f"✓ Deleted: {result['deleted']}")
    except Exception as e:
        print(f"✗ Error: {e}")
        sys.exit(1)
