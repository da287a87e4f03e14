"""
DSH - Main Entry Point
A variable-oriented shell with an arithmetic calculator
"""

import sys
import argparse
from pathlib import Path
from typing import List, Optional
import os

# Readline support for history and auto-completion
try:
  import readline
  READLINE_AVAILABLE = True
except ImportError:
  READLINE_AVAILABLE = False

from commands import AssignCommand, EvaluateCommand, Result
from parsing import parse_statement
from symbol_table import SymbolTable


VERSION = "DSH v0.3.0"

META_COMMANDS = [":env", ":type", ":help", "exit"]


def create_arg_parser() -> argparse.ArgumentParser:
  """Create command line argument parser"""
  parser = argparse.ArgumentParser(
      prog='dsh',
      description='DSH - variable shell with an arithmetic calculator',
      formatter_class=argparse.RawDescriptionHelpFormatter,
      epilog="""
Examples:
  %(prog)s -e "2 + 3 * 4"          # Evaluate one expression
  %(prog)s session.dsh             # Run a file of shell lines
  %(prog)s -i                      # Interactive mode
  %(prog)s --debug session.dsh     # Trace evaluation
        """
  )

  parser.add_argument(
      'script',
      nargs='?',
      help='File of shell lines to execute'
  )

  parser.add_argument(
      '-e', '--eval',
      metavar='EXPR',
      help='Evaluate a single expression and print the result'
  )

  parser.add_argument(
      '-i', '--interactive',
      action='store_true',
      help='Start interactive mode'
  )

  parser.add_argument(
      '--debug',
      action='store_true',
      help='Trace expression evaluation'
  )

  parser.add_argument(
      '--version',
      action='version',
      version=VERSION
  )

  return parser


# ============================================================================
# LINE EXECUTION
# ============================================================================

def run_line(line: str, env: SymbolTable, debug: bool = False) -> Optional[Result]:
  """Execute one shell line; blank lines and comments give None"""
  if not line.strip() or line.strip().startswith('#'):
    return None

  kind, payload = parse_statement(line)
  if kind == "ASSIGN":
    return AssignCommand(debug).execute(env, [payload['name'], payload['expression']])
  return EvaluateCommand(debug).execute(env, [payload])


def run_script_file(script_path: str, env: SymbolTable, debug: bool = False) -> int:
  """Run every line of a script; returns the number of failed lines"""
  try:
    with open(script_path, 'r', encoding='utf-8') as f:
      lines = f.readlines()
  except FileNotFoundError:
    print(f"Error: Script file '{script_path}' not found")
    print(f"  Hint: Check the file path and make sure the file exists")
    sys.exit(1)
  except PermissionError:
    print(f"Error: Permission denied reading '{script_path}'")
    sys.exit(1)
  except UnicodeDecodeError as e:
    print(f"Error: Cannot decode file '{script_path}': {e}")
    print(f"  Hint: Make sure the file is a text file with UTF-8 encoding")
    sys.exit(1)

  failures = 0
  for line_num, line in enumerate(lines, 1):
    result = run_line(line, env, debug)
    if result is None:
      continue
    if result.successful():
      print(result.message)
    else:
      failures += 1
      print(f"{script_path}:{line_num}: {result.message}")
  return failures


# ============================================================================
# INTERACTIVE MODE
# ============================================================================

def setup_readline(env: SymbolTable):
  """Setup readline with history and completion of variable names"""
  if not READLINE_AVAILABLE:
    return

  history_file = os.path.expanduser("~/.dsh_history")
  try:
    readline.read_history_file(history_file)
  except OSError:
    pass  # First time, no history yet, or permission denied

  readline.set_history_length(1000)

  def completer(text, state):
    options = [name for name in env.names() + META_COMMANDS if name.startswith(text)]
    if state < len(options):
      return options[state]
    return None

  readline.set_completer(completer)
  readline.parse_and_bind("tab: complete")

  import atexit
  atexit.register(readline.write_history_file, history_file)


def show_help() -> None:
  print("REPL Commands:")
  print("  :env              - Show current variables")
  print("  :type <name>      - Show the type of a variable")
  print("  :help             - Show this help")
  print("  exit              - Exit REPL")
  print()
  print("Shell lines:")
  print("  x = 2 + 3         - Assign the result of an expression")
  print("  (x + 1) * 2.5     - Evaluate and print an expression")


def show_env(env: SymbolTable) -> None:
  print("Current variables:")
  if not len(env):
    print("  (no variables)")
    return
  for name, value in env.items():
    val_str = str(value.as_string())
    if len(val_str) > 60:
      val_str = val_str[:57] + "..."
    print(f"  {name} = {val_str} : {value.type_name}")


def run_meta_command(code: str, env: SymbolTable) -> None:
  if code == ":env":
    show_env(env)
  elif code == ":help":
    show_help()
  elif code.startswith(":type"):
    name = code[len(":type"):].strip()
    value = env.get(name)
    if value is None:
      print(f"Undefined variable '{name}'")
    else:
      print(f"{name} : {value.type_name}")
  else:
    print(f"Unknown command '{code}', try :help")


def run_interactive_mode(env: SymbolTable, debug: bool = False) -> None:
  """Run DSH in interactive mode"""
  print(f"{VERSION} - Interactive Mode")
  print("Type 'exit' to quit, ':help' for commands")
  if debug:
    print("Debug mode enabled")
  print()

  setup_readline(env)

  while True:
    try:
      code = input("dsh> ").strip()

      if code == "exit":
        break
      if code.startswith(":"):
        run_meta_command(code, env)
        continue

      result = run_line(code, env, debug)
      if result is not None:
        print(result.message)

    except KeyboardInterrupt:
      print("\nGoodbye!")
      break
    except EOFError:
      print("\nGoodbye!")
      break


# ============================================================================
# ENTRY POINT
# ============================================================================

def main(argv: Optional[List[str]] = None) -> None:
  """Main entry point for DSH"""
  arg_parser = create_arg_parser()
  args = arg_parser.parse_args(argv)
  env = SymbolTable()

  if args.eval is not None:
    result = EvaluateCommand(args.debug).execute(env, [args.eval])
    print(result.message)
    if not result.successful():
      sys.exit(1)
    return

  if args.script:
    if not Path(args.script).exists():
      print(f"Error: Script file '{args.script}' does not exist")
      sys.exit(1)
    failures = run_script_file(args.script, env, debug=args.debug)
    if args.interactive:
      run_interactive_mode(env, debug=args.debug)
    elif failures:
      sys.exit(1)
    return

  if args.interactive:
    run_interactive_mode(env, debug=args.debug)
    return

  arg_parser.print_help()


if __name__ == "__main__":
  main()
