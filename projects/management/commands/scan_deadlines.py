from django.core.management.base import BaseCommand

from projects.deadlines import scan_deadlines


class Command(BaseCommand):
    help = "Runs one deadline scan and sends alerts for projects and tasks due soon (same pass as the beat task)"

    def handle(self, *args, **options):
        result = scan_deadlines()
        self.stdout.write(
            f"Window {result.window_start:%Y-%m-%d %H:%M} .. {result.window_end:%Y-%m-%d %H:%M}: "
            f"{result.projects} project(s), {result.tasks} task(s) due"
        )
        self.stdout.write(
            self.style.SUCCESS(f"Sent {len(result.report.sent)} alert(s), {len(result.report.failed)} failed")
        )
