#!/usr/bin/env python
import os
import sys


def main():
    os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'reviewer_service.settings')
    from django.core.management import execute_from_command_line

    # По умолчанию слушаем HTTP_PORT, как и прежний сервис
    if len(sys.argv) == 2 and sys.argv[1] == 'runserver':
        sys.argv.append(f"0.0.0.0:{os.environ.get('HTTP_PORT', '8080')}")

    execute_from_command_line(sys.argv)


if __name__ == '__main__':
    main()
