# apps/core/management/commands/check_ordering.py

from django.core.management.base import BaseCommand

from apps.board import ordering
from apps.core.models import Board, Project, Task


class Command(BaseCommand):
    help = 'Report parents whose boards/tasks are not numbered 0..N-1'

    def add_arguments(self, parser):
        parser.add_argument(
            '--fix',
            action='store_true',
            help='Compact every broken parent to 0..N-1'
        )

    def handle(self, *args, **options):
        self.stdout.write('🔍 Checking board and task ordering...')

        broken = 0
        for model, parents in ((Board, Project.objects.all()), (Task, Board.objects.all())):
            for parent in parents:
                orders = ordering.siblings(model, parent.id).values_list('order', flat=True)
                if ordering.is_dense(orders):
                    continue

                broken += 1
                self.stdout.write(
                    self.style.WARNING(
                        f'  ⚠️  {model.__name__}s of {parent.__class__.__name__} '
                        f'{parent.id} are not dense: {sorted(orders)}'
                    )
                )
                if options['fix']:
                    changed = ordering.compact(model, parent.id)
                    self.stdout.write(f'     🔧 {changed} row(s) renumbered')

        if not broken:
            self.stdout.write(self.style.SUCCESS('✅ All orderings are dense'))
        elif options['fix']:
            self.stdout.write(self.style.SUCCESS(f'✅ Fixed {broken} parent(s)'))
        else:
            self.stdout.write(
                self.style.ERROR(
                    f'❌ {broken} parent(s) need compaction; '
                    'run again with --fix'
                )
            )
