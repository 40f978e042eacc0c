"""Interface-level constants and message catalogue for the dashboard."""

DATE_FORMAT = "%Y-%m-%d"
TIME_FORMAT = "%H:%M"

LANG_PACK = {
    "en": {
        "TITLE": "taskdash",
        "COL_ID": "ID",
        "COL_PROJECT": "Project",
        "COL_PRI": "P",
        "COL_DUE": "Due",
        "COL_DESCRIPTION": "Description",
        "COL_URGENCY": "Urg",
        "COL_TAGS": "Tags",
        "EMPTY": "No tasks match filter: {filter}",
        "FILTER_LABEL": "Filter",
        "CONTEXT_TITLE": "Context",
        "HELP_TITLE": "Keys (esc to close)",
        "CALENDAR_TITLE": "Calendar {year} (j/k to change year, esc to close)",
        "PROMPT_FILTER": "Filter: ",
        "PROMPT_ANNOTATE": "Annotate: ",
        "PROMPT_ADD": "Add: ",
        "PROMPT_MODIFY": "Modify: ",
        "PROMPT_LOG": "Log: ",
        "PROMPT_SHELL": "Shell: ",
        "PROMPT_JUMP": "Jump to id: ",
        "CONFIRM_DONE": "Mark {count} task(s) done? (y/n)",
        "CONFIRM_DELETE": "Delete {count} task(s)? (y/n)",
        "CONFIRM_UNDO": "Undo the last change? (y/n)",
        "CONFIRM_MODIFY": "Modify {count} task(s) with {args}? (y/n)",
        "RUNNING_SHORTCUT": "Running shortcut...",
        "STATUS_COUNTS": "{visible} shown, {marked} marked",
        "STATUS_TRACKING": "tracking {count}",
        "STATUS_TRACKING_SINCE": "tracking {count} since {start} ({duration})",
        "MSG_DONE": "Completed {count} task(s)",
        "MSG_DELETE": "Deleted {count} task(s)",
        "MSG_UNDO": "Undid last change",
        "MSG_STARTED": "Started task {id}",
        "MSG_STOPPED": "Stopped task {id}",
        "MSG_ADDED": "Task added",
        "MSG_LOGGED": "Task logged",
        "MSG_MODIFIED": "Task(s) modified",
        "MSG_ANNOTATED": "Annotated {count} task(s)",
        "MSG_CONTEXT": "Context set to {name}",
        "MSG_SHORTCUT_DONE": "Shortcut {number} finished",
        "MSG_SHELL_DONE": "Command finished",
        "ERR_ACTION_FAILED": "{area} error: {error}",
        "ERR_NO_SHORTCUT": "No script configured for shortcut {number}",
        "ERR_PARSE": "Cannot parse command: {error}",
        "ERR_BAD_ID": "Not a task id: {value}",
        "ERR_NO_TASK": "No visible task with id {id}",
        "ERR_BINDING": "Key binding: {detail}",
        "ERR_BACKGROUND": "Background process disabled: {error}",
    },
    "ru": {
        "COL_PROJECT": "Проект",
        "COL_DESCRIPTION": "Описание",
        "COL_DUE": "Срок",
        "EMPTY": "Нет задач по фильтру: {filter}",
        "FILTER_LABEL": "Фильтр",
        "CONTEXT_TITLE": "Контекст",
        "HELP_TITLE": "Клавиши (esc чтобы закрыть)",
        "CALENDAR_TITLE": "Календарь {year} (j/k год, esc чтобы закрыть)",
        "PROMPT_FILTER": "Фильтр: ",
        "PROMPT_ANNOTATE": "Заметка: ",
        "PROMPT_ADD": "Добавить: ",
        "PROMPT_MODIFY": "Изменить: ",
        "PROMPT_LOG": "Записать: ",
        "PROMPT_SHELL": "Команда: ",
        "PROMPT_JUMP": "Перейти к id: ",
        "CONFIRM_DONE": "Завершить задач: {count}? (y/n)",
        "CONFIRM_DELETE": "Удалить задач: {count}? (y/n)",
        "CONFIRM_UNDO": "Отменить последнее изменение? (y/n)",
        "CONFIRM_MODIFY": "Изменить задач: {count} ({args})? (y/n)",
        "RUNNING_SHORTCUT": "Выполняется скрипт...",
        "STATUS_COUNTS": "показано {visible}, отмечено {marked}",
        "STATUS_TRACKING": "учёт времени: {count}",
        "STATUS_TRACKING_SINCE": "учёт времени: {count} с {start} ({duration})",
        "COL_TAGS": "Метки",
        "MSG_DONE": "Завершено задач: {count}",
        "MSG_DELETE": "Удалено задач: {count}",
        "MSG_UNDO": "Последнее изменение отменено",
        "MSG_STARTED": "Задача {id} начата",
        "MSG_STOPPED": "Задача {id} остановлена",
        "MSG_ADDED": "Задача добавлена",
        "MSG_LOGGED": "Задача записана",
        "MSG_MODIFIED": "Задачи изменены",
        "MSG_ANNOTATED": "Заметка добавлена к задачам: {count}",
        "MSG_CONTEXT": "Контекст: {name}",
        "ERR_ACTION_FAILED": "ошибка ({area}): {error}",
    },
}
