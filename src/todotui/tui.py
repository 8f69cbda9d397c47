"""todotui curses-based terminal user interface."""

import curses
import locale
import logging
import os
import sys
from typing import List, Optional, Sequence, Tuple, Union

from .app import AppState, Editing, InfoOverlay, InputForm, checkboxes, handle_key
from .models import DEFAULT_PATH, LOG_PATH, PROGRESS_LABELS, Task
from .storage import SaveError
from .store import TaskStore

logger = logging.getLogger(__name__)

INFO_TEXT = "(I) Info | (Esc) quit"
ITEM_HEIGHT = 4
NAME_WIDTH = 22
DESCRIPTION_WIDTH = 42
MIN_DESCRIPTION_WIDTH = 10
HIGHLIGHT_SYMBOL = ["", " █ ", " █ ", ""]
HIGHLIGHT_WIDTH = 3
HEADERS = ("Name", "Description", "Progress", "Created")
CHECKBOX_COLUMNS = 3

INFO_TITLE = "todotui"
INFO_LINES = [
    "Commands:",
    "(I) info | (Esc) quit",
    "(A) create new todo | (X) delete todo | (R) edit todo",
    "(N) next progress | (T) hide completed",
    "(↑) move up | (↓) move down | (→) next color | (←) previous color",
    "",
    "Popup: Tab switch field | Enter next/save | Esc cancel",
]

NAMED_KEYS = {
    curses.KEY_UP: "up",
    curses.KEY_DOWN: "down",
    curses.KEY_LEFT: "left",
    curses.KEY_RIGHT: "right",
    curses.KEY_ENTER: "enter",
    curses.KEY_BACKSPACE: "backspace",
    curses.KEY_DC: "delete",
    "\n": "enter",
    "\r": "enter",
    "\x1b": "esc",
    "\t": "tab",
    "\x7f": "backspace",
    "\x08": "backspace",
}

ACCENT_COLORS = {
    "blue": curses.COLOR_BLUE,
    "emerald": curses.COLOR_GREEN,
    "indigo": curses.COLOR_MAGENTA,
    "red": curses.COLOR_RED,
}
PROGRESS_COLORS = {
    "Waiting": curses.COLOR_RED,
    "InProgress": curses.COLOR_YELLOW,
    "Done": curses.COLOR_GREEN,
}


def normalize_key(wch: Union[str, int]) -> Optional[str]:
    """Map a get_wch() result to the app's key names, or None to ignore it."""
    named = NAMED_KEYS.get(wch)
    if named:
        return named
    if isinstance(wch, str) and len(wch) == 1 and wch.isprintable():
        return wch
    return None


def wrap_text(text: str, width: int) -> List[str]:
    """Split text into chunks of at most `width` characters."""
    if width < 1:
        return [text]
    return [text[i : i + width] for i in range(0, len(text), width)] or [""]


def popup_area(height: int, width: int, popup_h: int, popup_w: int) -> Tuple[int, int, int, int]:
    """Return (y, x, h, w) of a popup centred on a height x width screen."""
    popup_h = max(0, min(popup_h, height))
    popup_w = max(0, min(popup_w, width))
    return (height - popup_h) // 2, (width - popup_w) // 2, popup_h, popup_w


def column_widths(tasks: Sequence[Task], total_width: int) -> Tuple[int, int, int, int]:
    """Widths of the Name, Description, Progress and Created columns.

    Progress and Created fit their longest value; Description gives up
    space first when the screen is narrow.
    """
    progress_w = max([len(HEADERS[2])] + [len(PROGRESS_LABELS[t.progress]) for t in tasks])
    created_w = max([len(HEADERS[3])] + [len(t.created) for t in tasks])
    fixed = HIGHLIGHT_WIDTH + NAME_WIDTH + progress_w + created_w + len(HEADERS) + 1
    description_w = max(MIN_DESCRIPTION_WIDTH, min(DESCRIPTION_WIDTH, total_width - fixed))
    return NAME_WIDTH, description_w, progress_w, created_w


def scroll_offset(selected: int, offset: int, visible_rows: int) -> int:
    """First visible row so that `selected` stays on screen."""
    if visible_rows < 1:
        return 0
    if selected < offset:
        return selected
    if selected >= offset + visible_rows:
        return selected - visible_rows + 1
    return offset


def scrollbar_thumb(count: int, selected: int, track: int) -> int:
    if count <= 1 or track <= 1:
        return 0
    return min(track - 1, selected * (track - 1) // (count - 1))


def default_background() -> int:
    """Background for colour pairs: the terminal's own (-1) when allowed, else black."""
    try:
        curses.use_default_colors()
    except curses.error:
        return curses.COLOR_BLACK
    return -1


def _put(win, y: int, x: int, text: str, attr: int = curses.A_NORMAL) -> None:
    """addnstr clipped to the window; the bottom-right cell may refuse writes."""
    h, w = win.getmaxyx()
    if y < 0 or y >= h or x < 0 or x >= w or not text:
        return
    try:
        win.addnstr(y, x, text, w - x, attr)
    except curses.error:
        pass


class TUI:
    """Curses front end: draws an AppState and feeds it key presses."""

    def __init__(self, stdscr, state: AppState):
        self.stdscr = stdscr
        self.state = state
        self.scroll = 0
        curses.curs_set(0)
        self.stdscr.keypad(True)
        self.height, self.width = self.stdscr.getmaxyx()

        self.has_colors = curses.has_colors()
        self.alt_row = curses.A_NORMAL
        if self.has_colors:
            curses.start_color()
            background = default_background()
            for i, accent in enumerate(ACCENT_COLORS.values()):
                curses.init_pair(1 + i, accent, background)
                curses.init_pair(5 + i, curses.COLOR_WHITE, accent)
            for i, fg in enumerate(PROGRESS_COLORS.values()):
                curses.init_pair(9 + i, fg, background)
            # -1 is only a valid colour once use_default_colors() succeeded
            if background == -1 and curses.COLORS >= 256:
                curses.init_pair(12, -1, 235)
                self.alt_row = curses.color_pair(12)

    # -------------------- attributes --------------------

    def _palette_slot(self) -> int:
        return list(ACCENT_COLORS).index(self.state.palette)

    def accent_attr(self) -> int:
        if not self.has_colors:
            return curses.A_BOLD
        return curses.color_pair(1 + self._palette_slot())

    def header_attr(self) -> int:
        if not self.has_colors:
            return curses.A_REVERSE
        return curses.color_pair(5 + self._palette_slot()) | curses.A_BOLD

    def progress_attr(self, progress: str) -> int:
        if not self.has_colors:
            return curses.A_NORMAL
        return curses.color_pair(9 + list(PROGRESS_COLORS).index(progress))

    # -------------------- drawing --------------------

    def draw(self):
        """Render table, scrollbar, footer and the active popup."""
        self.stdscr.erase()
        self.height, self.width = self.stdscr.getmaxyx()
        if self.height < 6 or self.width < 30:
            _put(self.stdscr, 0, 0, "Terminal too small")
            self.stdscr.refresh()
            return

        view = self.state.view()
        table_h = self.height - 3
        self.draw_table(view, table_h)
        self.draw_scrollbar(len(view), table_h)
        self.draw_footer()
        self.stdscr.noutrefresh()

        mode = self.state.mode
        if isinstance(mode, Editing):
            self.draw_form(mode.form)
        elif isinstance(mode, InfoOverlay):
            curses.curs_set(0)
            self.draw_info(mode)
        else:
            curses.curs_set(0)
        curses.doupdate()

    def draw_table(self, view: List[Task], table_h: int):
        widths = column_widths(view, self.width)
        header_attr = self.header_attr()
        _put(self.stdscr, 0, 0, " " * self.width, header_attr)
        x = HIGHLIGHT_WIDTH
        for title, w in zip(HEADERS, widths):
            _put(self.stdscr, 0, x, title, header_attr)
            x += w + 1

        if not view:
            msg = "No tasks. Press 'a' to add one." if not self.state.store.tasks else "All tasks are completed."
            _put(self.stdscr, 2, HIGHLIGHT_WIDTH, msg, curses.A_DIM)
            return

        visible_rows = max(1, (table_h - 1) // ITEM_HEIGHT)
        self.scroll = scroll_offset(self.state.selected, self.scroll, visible_rows)
        self.scroll = min(self.scroll, max(0, len(view) - visible_rows))
        for pos, task in enumerate(view[self.scroll : self.scroll + visible_rows]):
            self.draw_row(task, self.scroll + pos, 1 + pos * ITEM_HEIGHT, widths, table_h)

    def draw_row(self, task: Task, idx: int, top: int, widths: Tuple[int, int, int, int], bottom: int):
        selected = idx == self.state.selected
        if selected:
            base = self.accent_attr() | curses.A_REVERSE
        else:
            base = self.alt_row if idx % 2 else curses.A_NORMAL
        name_w, description_w, _, _ = widths
        cells = [
            wrap_text(task.name, name_w),
            wrap_text(task.description, description_w),
            [PROGRESS_LABELS[task.progress]],
            [task.created],
        ]
        for line in range(ITEM_HEIGHT):
            y = top + line
            if y >= bottom:
                break
            _put(self.stdscr, y, 0, " " * (self.width - 1), base)
            if selected:
                _put(self.stdscr, y, 0, HIGHLIGHT_SYMBOL[line], base)
            x = HIGHLIGHT_WIDTH
            for col, (lines, w) in enumerate(zip(cells, widths)):
                if line < len(lines):
                    attr = base
                    if col == 2 and not selected:
                        attr = self.progress_attr(task.progress)
                    _put(self.stdscr, y, x, lines[line][:w], attr)
                x += w + 1

    def draw_scrollbar(self, count: int, table_h: int):
        track = table_h - 1
        if track < 1 or count * ITEM_HEIGHT <= track:
            return
        thumb = scrollbar_thumb(count, self.state.selected, track)
        x = self.width - 1
        for i in range(track):
            if i == thumb:
                _put(self.stdscr, 1 + i, x, "█", self.accent_attr())
            else:
                _put(self.stdscr, 1 + i, x, "│", curses.A_DIM)

    def draw_footer(self):
        footer = self.stdscr.derwin(3, self.width, self.height - 3, 0)
        self._border(footer, self.accent_attr())
        text = self.state.status or INFO_TEXT
        text = text[: self.width - 2]
        _put(footer, 1, max(1, (self.width - len(text)) // 2), text)

    def _border(self, win, attr: int, title: str = ""):
        win.attron(attr)
        win.border()
        win.attroff(attr)
        if title:
            _put(win, 0, 2, f" {title} ", attr | curses.A_BOLD)

    def _popup(self):
        y, x, h, w = popup_area(self.height, self.width, self.height, self.width // 2)
        if h < 8 or w < 12:
            return None
        win = curses.newwin(h, w, y, x)
        win.erase()
        return win

    def draw_form(self, form: InputForm):
        win = self._popup()
        if win is None:
            return
        h, w = win.getmaxyx()
        accent = self.accent_attr()
        inner = w - 2

        name_box = win.derwin(3, w, 0, 0)
        self._border(name_box, accent if form.focus == "name" else curses.A_NORMAL, "Name")
        name_shown = form.name[-(inner - 1) :]
        _put(name_box, 1, 1, name_shown)

        desc_h = h - 4
        desc_box = win.derwin(desc_h, w, 4, 0)
        self._border(desc_box, accent if form.focus == "description" else curses.A_NORMAL, "Description")
        lines = wrap_text(form.description, inner)
        rows = desc_h - 2
        shown = lines[-rows:] if rows > 0 else []
        for i, line in enumerate(shown):
            _put(desc_box, 1 + i, 1, line)

        if form.focus == "name":
            cy, cx = 1, 1 + min(len(name_shown), inner - 1)
        elif shown:
            cy, cx = 4 + len(shown), 1 + min(len(shown[-1]), inner - 1)
        else:
            cy, cx = 5, 1
        curses.curs_set(1)
        try:
            win.move(cy, cx)
        except curses.error:
            pass
        win.noutrefresh()

    def draw_info(self, overlay: InfoOverlay):
        win = self._popup()
        if win is None:
            return
        h, w = win.getmaxyx()
        accent = self.accent_attr()
        self._border(win, accent)
        _put(win, 2, max(1, (w - len(INFO_TITLE)) // 2), INFO_TITLE, accent | curses.A_BOLD)

        boxes = checkboxes(self.state)
        col_w = (w - 2) // CHECKBOX_COLUMNS
        for i, box in enumerate(boxes):
            row, col = divmod(i, CHECKBOX_COLUMNS)
            label = f"[{'✔' if box.checked else ' '}] {box.label}"
            attr = accent | curses.A_BOLD if i == overlay.cursor else curses.A_NORMAL
            _put(win, 4 + row * 2, 2 + col * col_w, label[: max(0, col_w - 1)], attr)

        rows = (len(boxes) + CHECKBOX_COLUMNS - 1) // CHECKBOX_COLUMNS
        info_y = 4 + rows * 2 + 1
        info_h = h - 1 - info_y
        if info_h >= 3:
            info = win.derwin(info_h, w - 2, info_y, 1)
            self._border(info, accent, "Information")
            for i, line in enumerate(INFO_LINES[: info_h - 2]):
                attr = curses.A_BOLD if line.endswith(":") else curses.A_NORMAL
                _put(info, 1 + i, 1, line[: w - 4], attr)
        win.noutrefresh()

    # -------------------- event loop --------------------

    def run(self):
        """Main event loop."""
        while True:
            self.draw()
            try:
                wch = self.stdscr.get_wch()
            except curses.error:
                continue
            if wch == curses.KEY_RESIZE:
                continue
            key = normalize_key(wch)
            if key is None:
                continue
            if not handle_key(self.state, key):
                break


def start_curses(state: AppState):
    """Initialize curses and run TUI."""

    def _main(stdscr):
        if hasattr(curses, "set_escdelay"):
            curses.set_escdelay(25)
        TUI(stdscr, state).run()

    curses.wrapper(_main)


def main(path: str = DEFAULT_PATH) -> None:
    """TUI entry point."""
    logging.basicConfig(
        filename=LOG_PATH,
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )
    locale.setlocale(locale.LC_ALL, "")

    store = TaskStore.open(path)
    state = AppState(store)
    if store.load_error is not None and os.path.exists(path):
        state.status = f"{store.load_error} (starting with an empty list)"

    try:
        start_curses(state)
    except SaveError as e:
        logger.critical("Could not save the first task, exiting: %s", e)
        sys.exit(str(e))
    logger.info("Exited normally")


if __name__ == "__main__":
    main()
