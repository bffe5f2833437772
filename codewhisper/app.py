"""
CodeWhisper Try-It window.

Layout
------
┌──────────────────────────────────────────────────────────┐
│ Menu: File | Session                                      │
├──────────────────────────────────────────────────────────┤
│ Provider [▾] Model [▾]  API key [••••••] [Set Key] status  │  ← key_bar
├───────────────────────────┬──────────────────────────────┤
│ Chat display (scrollable) │  Code editor                  │
│                           │                               │
│ Task [▾]                  │                               │
│ Input…       [Send][Clr]  │           [Copy] [Download]   │
└───────────────────────────┴──────────────────────────────┘

All network work runs on the service's worker pool; results come back to
the Tk thread through a queue pumped with ``after``.
"""

import logging
import queue
import tkinter as tk
from concurrent.futures import Future
from tkinter import filedialog, messagebox, scrolledtext, ttk

from .chat import ChatMessage, ChatTranscript
from .errors import AuthenticationError, CodeGenError, UnknownError
from .providers import get_provider, provider_names
from .service import CodeGenService
from .session import SessionContext

log = logging.getLogger("codewhisper")

DEFAULT_CODE = """// Try writing some code here
function calculateTotal(items) {
  // Ask the assistant to complete this
}
"""

_TASK_LABELS: dict[str, str | None] = {
    "Chat": None,
    "Generate": "generate",
    "Improve / complete": "improve",
}


class TryItApp:
    """Chat on the left, editor on the right."""

    def __init__(self, session: SessionContext, provider_name: str) -> None:
        self.root = tk.Tk()
        self.root.title("CodeWhisper — Try it")
        self.root.geometry("1100x680")
        self.root.minsize(800, 480)

        self._session = session
        self._services: dict[str, CodeGenService] = {}
        self._transcript = ChatTranscript()
        self._queue: queue.Queue = queue.Queue()
        self._in_flight = 0

        self._provider_var = tk.StringVar(value=provider_name)
        self._model_var = tk.StringVar()
        self._key_var = tk.StringVar()
        self._task_var = tk.StringVar(value=next(iter(_TASK_LABELS)))
        self._status_var = tk.StringVar()

        self._build_menu()
        self._build_key_bar()
        self._build_panes()

        self._on_provider_changed()
        self._render_transcript()
        self._pump_queue()

        self.root.protocol("WM_DELETE_WINDOW", self._on_close)

    # ------------------------------------------------------------------
    # Services
    # ------------------------------------------------------------------

    @property
    def service(self) -> CodeGenService:
        name = self._provider_var.get()
        svc = self._services.get(name)
        if svc is None:
            svc = CodeGenService(self._session, get_provider(name))
            self._services[name] = svc
        return svc

    # ------------------------------------------------------------------
    # UI construction
    # ------------------------------------------------------------------

    def _build_menu(self) -> None:
        bar = tk.Menu(self.root)
        self.root.config(menu=bar)

        file_menu = tk.Menu(bar, tearoff=False)
        bar.add_cascade(label="File", menu=file_menu)
        file_menu.add_command(label="Save Chat…", command=self._save_chat)
        file_menu.add_command(label="Download Code…", command=self._download_code)
        file_menu.add_separator()
        file_menu.add_command(label="Exit", command=self._on_close)

        session_menu = tk.Menu(bar, tearoff=False)
        bar.add_cascade(label="Session", menu=session_menu)
        session_menu.add_command(label="Forget Keys", command=self._forget_keys)

    def _build_key_bar(self) -> None:
        frame = ttk.Frame(self.root, padding=(10, 6))
        frame.pack(fill=tk.X)

        ttk.Label(frame, text="Provider:").pack(side=tk.LEFT)
        provider_cb = ttk.Combobox(
            frame, textvariable=self._provider_var,
            values=provider_names(), state="readonly", width=10,
        )
        provider_cb.pack(side=tk.LEFT, padx=(4, 12))
        provider_cb.bind("<<ComboboxSelected>>",
                         lambda _e: self._on_provider_changed())

        ttk.Label(frame, text="Model:").pack(side=tk.LEFT)
        self._model_cb = ttk.Combobox(
            frame, textvariable=self._model_var, width=22,
        )
        self._model_cb.pack(side=tk.LEFT, padx=(4, 12))
        self._model_cb.bind("<<ComboboxSelected>>",
                            lambda _e: self._on_model_changed())
        self._model_cb.bind("<Return>", lambda _e: self._on_model_changed())

        ttk.Label(frame, text="API key:").pack(side=tk.LEFT)
        self._key_entry = ttk.Entry(frame, textvariable=self._key_var,
                                    show="•", width=30)
        self._key_entry.pack(side=tk.LEFT, padx=4)
        self._key_entry.bind("<Return>", lambda _e: self._set_key())
        ttk.Button(frame, text="Set Key", command=self._set_key).pack(side=tk.LEFT)

        ttk.Label(frame, textvariable=self._status_var,
                  foreground="#444").pack(side=tk.RIGHT)

    def _build_panes(self) -> None:
        paned = ttk.PanedWindow(self.root, orient=tk.HORIZONTAL)
        paned.pack(fill=tk.BOTH, expand=True, padx=10, pady=(0, 10))

        # -- Chat --
        left = ttk.Frame(paned)
        paned.add(left, weight=2)

        self._chat = scrolledtext.ScrolledText(
            left, wrap=tk.WORD, state=tk.DISABLED, font=("", 10),
            relief=tk.SUNKEN, borderwidth=1,
        )
        self._chat.pack(fill=tk.BOTH, expand=True)
        self._chat.tag_config("user_lbl", foreground="#005cc5", font=("", 10, "bold"))
        self._chat.tag_config("asst_lbl", foreground="#6f42c1", font=("", 10, "bold"))
        self._chat.tag_config("msg", foreground="#1a1a2e")
        self._chat.tag_config("err_msg", foreground="#c0392b")
        self._chat.tag_config("time", foreground="#6c757d", font=("", 8))

        task_row = ttk.Frame(left)
        task_row.pack(fill=tk.X, pady=(6, 2))
        ttk.Label(task_row, text="Task:").pack(side=tk.LEFT)
        ttk.Combobox(
            task_row, textvariable=self._task_var,
            values=list(_TASK_LABELS), state="readonly", width=20,
        ).pack(side=tk.LEFT, padx=4)

        input_row = ttk.Frame(left)
        input_row.pack(fill=tk.X)
        self._input = scrolledtext.ScrolledText(
            input_row, height=4, wrap=tk.WORD, font=("", 10),
            relief=tk.SUNKEN, borderwidth=1,
        )
        self._input.pack(side=tk.LEFT, fill=tk.X, expand=True)
        self._input.bind("<Return>", self._on_enter_key)

        buttons = ttk.Frame(input_row)
        buttons.pack(side=tk.LEFT, padx=(6, 0))
        ttk.Button(buttons, text="Send ➤", command=self._send, width=9).pack(pady=2)
        ttk.Button(buttons, text="Clear 🗑", command=self._clear_chat, width=9).pack(pady=2)

        ttk.Label(left, text="Press Enter to send. Shift+Enter for new line.",
                  foreground="#6c757d").pack(anchor=tk.W, pady=(2, 0))

        # -- Editor --
        right = ttk.Frame(paned)
        paned.add(right, weight=3)

        bar = ttk.Frame(right)
        bar.pack(fill=tk.X)
        ttk.Label(bar, text="Code Editor", font=("", 11, "bold")).pack(side=tk.LEFT)
        ttk.Button(bar, text="Download", command=self._download_code).pack(side=tk.RIGHT)
        self._copy_btn = ttk.Button(bar, text="Copy", command=self._copy_code)
        self._copy_btn.pack(side=tk.RIGHT, padx=4)

        self._editor = scrolledtext.ScrolledText(
            right, wrap=tk.NONE, font=("Courier", 10), undo=True,
            relief=tk.SUNKEN, borderwidth=1,
        )
        self._editor.pack(fill=tk.BOTH, expand=True, pady=(4, 0))
        self._editor.insert("1.0", DEFAULT_CODE)

    # ------------------------------------------------------------------
    # Chat display
    # ------------------------------------------------------------------

    def _append(self, msg: ChatMessage) -> None:
        self._chat.config(state=tk.NORMAL)
        if self._chat.get("1.0", tk.END).strip():
            self._chat.insert(tk.END, "\n\n")
        if msg.role == "user":
            self._chat.insert(tk.END, "You", "user_lbl")
        else:
            self._chat.insert(tk.END, "CodeWhisper", "asst_lbl")
        self._chat.insert(tk.END, f"  {msg.timestamp:%H:%M:%S}\n", "time")
        self._chat.insert(tk.END, msg.content, "err_msg" if msg.is_error else "msg")
        self._chat.config(state=tk.DISABLED)
        self._chat.see(tk.END)

    def _render_transcript(self) -> None:
        self._chat.config(state=tk.NORMAL)
        self._chat.delete("1.0", tk.END)
        self._chat.config(state=tk.DISABLED)
        for msg in self._transcript.messages:
            self._append(msg)

    def _update_status(self) -> None:
        svc = self.service
        key_state = "🔑 key set" if svc.get_api_key() else "⚠️  no key"
        busy = f"  |  generating… ({self._in_flight})" if self._in_flight else ""
        self._status_var.set(f"{svc.provider.display_name}: {key_state}{busy}")

    # ------------------------------------------------------------------
    # Queue pump (bridges worker threads → Tk thread)
    # ------------------------------------------------------------------

    def _pump_queue(self) -> None:
        try:
            while True:
                kind, payload = self._queue.get_nowait()
                self._in_flight = max(0, self._in_flight - 1)
                if kind == "done":
                    self._show_code(payload)
                elif kind == "error":
                    self._show_error(payload)
                self._update_status()
        except queue.Empty:
            pass
        self.root.after(40, self._pump_queue)

    def _on_done(self, future: Future) -> None:
        """Runs on a worker thread: hand the outcome to the Tk thread."""
        if future.cancelled():
            return
        exc = future.exception()
        if exc is None:
            self._queue.put(("done", future.result()))
        elif isinstance(exc, CodeGenError):
            self._queue.put(("error", exc))
        else:
            log.error("[APP] Unexpected error from worker: %s", exc)
            self._queue.put(("error", UnknownError(str(exc) or type(exc).__name__)))

    def _show_code(self, code: str) -> None:
        self._append(self._transcript.add_assistant(
            "Here is the generated code. It is now in the editor."
            if code else "The model returned an empty answer."
        ))
        if code:
            self._editor.delete("1.0", tk.END)
            self._editor.insert("1.0", code)

    def _show_error(self, exc: CodeGenError) -> None:
        self._append(self._transcript.add_error(exc))
        messagebox.showerror(type(exc).__name__, exc.message)
        if isinstance(exc, AuthenticationError):
            self._key_entry.focus_set()

    # ------------------------------------------------------------------
    # Actions
    # ------------------------------------------------------------------

    def _on_provider_changed(self) -> None:
        svc = self.service
        models = list(svc.provider.models.values())
        current = svc.get_model()
        if current not in models:
            models.insert(0, current)
        self._model_cb.config(values=models)
        self._model_var.set(current)
        self._key_var.set(svc.get_api_key() or "")
        self._update_status()

    def _on_model_changed(self) -> None:
        model = self._model_var.get().strip()
        if model:
            self.service.set_model(model)
            log.info("[APP] Model set to %s", model)

    def _set_key(self) -> None:
        key = self._key_var.get().strip()
        if not key:
            messagebox.showerror("Error", "Please enter an API key")
            return
        self.service.set_api_key(key)
        self._update_status()
        messagebox.showinfo("Success", "API key set successfully")

    def _forget_keys(self) -> None:
        self._session.clear()
        for svc in self._services.values():
            svc.binding.reset()
        self._key_var.set("")
        self._on_provider_changed()

    def _on_enter_key(self, event: tk.Event) -> str | None:
        if event.state & 0x1:  # Shift held
            return None
        self._send()
        return "break"

    def _send(self) -> None:
        text = self._input.get("1.0", tk.END).strip()
        if not text:
            return
        task = _TASK_LABELS.get(self._task_var.get())
        if task == "improve":
            # The editor content is the code to work on.
            code = self._editor.get("1.0", tk.END).strip()
            prompt = f"{text}\n\n```\n{code}\n```" if code else text
        else:
            prompt = text

        self._append(self._transcript.add_user(text))
        self._input.delete("1.0", tk.END)

        try:
            future = self.service.generate_code_async(
                prompt, model=self._model_var.get().strip() or None, task=task,
            )
        except AuthenticationError as exc:
            self._show_error(exc)
            return
        self._in_flight += 1
        self._update_status()
        future.add_done_callback(self._on_done)

    def _clear_chat(self) -> None:
        self._transcript.clear()
        self._render_transcript()

    def _copy_code(self) -> None:
        self.root.clipboard_clear()
        self.root.clipboard_append(self._editor.get("1.0", "end-1c"))
        self._copy_btn.config(text="Copied")
        self.root.after(2000, lambda: self._copy_btn.config(text="Copy"))

    def _download_code(self) -> None:
        path = filedialog.asksaveasfilename(
            title="Download Code",
            initialfile="codewhisper-example.js",
            filetypes=[("All files", "*.*")],
        )
        if not path:
            return
        with open(path, "w", encoding="utf-8") as fh:
            fh.write(self._editor.get("1.0", "end-1c"))

    def _save_chat(self) -> None:
        path = filedialog.asksaveasfilename(
            title="Save Chat",
            defaultextension=".txt",
            filetypes=[("Text", "*.txt"), ("JSON", "*.json"), ("All files", "*.*")],
        )
        if not path:
            return
        with open(path, "w", encoding="utf-8") as fh:
            if path.endswith(".json"):
                fh.write(self._transcript.to_json())
            else:
                fh.write(self._transcript.to_text())
        messagebox.showinfo("Saved", f"Chat saved to:\n{path}")

    def _on_close(self) -> None:
        for svc in self._services.values():
            svc.close()
        self.root.destroy()

    def run(self) -> None:
        self.root.mainloop()

