# Command line entry point
#
# Lists interactive logon, logoff, lock and unlock events from the
# Security log over the last few days, oldest first.
import argparse
import sys

from sessionaudit.config import DEFAULT_DAYS, setup_logging
from sessionaudit.report import run_report


def positive_int(value):
   try:
      days = int(value)
   except ValueError:
      raise argparse.ArgumentTypeError(f'{value!r} is not a number of days')
   if days < 1:
      raise argparse.ArgumentTypeError('days must be at least 1')
   return days


def build_parser():
   parser = argparse.ArgumentParser(
      prog='sessionaudit',
      description='Report interactive session activity from the Windows Security log',
   )
   parser.add_argument('-d', '--days', type=positive_int, default=DEFAULT_DAYS,
                       help=f'how many days back to look (default {DEFAULT_DAYS})')
   return parser


def main(argv=None, query=None, lookup=None):
   args = build_parser().parse_args(argv)
   setup_logging()

   activities = run_report(args.days, query=query, lookup=lookup)
   # None only when the Security log could not be read
   return 1 if activities is None else 0


if __name__ == '__main__':
   sys.exit(main())
