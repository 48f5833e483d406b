# filename: app.py
# Aplicação Flask principal do CMS.
import logging
import mimetypes
from functools import wraps
from typing import NamedTuple, Optional

from flask import (
    Flask,
    Blueprint,
    Response,
    current_app,
    flash,
    redirect,
    render_template,
    request,
    session,
    url_for,
)

from auth import AuthGate
from config import Settings
from db import CredentialStore, HistoryStore, init_stores_and_seed_admin
from documents import (
    DocumentStore,
    classify,
    edit_document,
    ensure_editable,
    is_markdown,
    render_markdown,
    validate_name,
)
from errors import (
    AlreadyExists,
    AuthenticationFailed,
    AuthorizationRequired,
    InvalidName,
    NotFound,
)
from models import FileKind

logger = logging.getLogger(__name__)

bp = Blueprint("cms", __name__)


class CMSStores(NamedTuple):
    documents: DocumentStore
    credentials: CredentialStore
    history: HistoryStore


def _configure_logging(level) -> None:
    numeric = level if isinstance(level, int) else getattr(logging, str(level).upper(), logging.INFO)
    logging.basicConfig(
        level=numeric,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def _stores() -> CMSStores:
    return current_app.extensions["cms"]


def _to_index():
    return redirect(url_for("cms.index"))


# ===== Auth helpers =====
def current_gate() -> AuthGate:
    return AuthGate(session)


def login_required(func):
    @wraps(func)
    def wrapper(*args, **kwargs):
        current_gate().require_signed_in()
        return func(*args, **kwargs)
    return wrapper


@bp.app_context_processor
def inject_user():
    return {"current_user": current_gate().username}


# ===== Erros =====
@bp.app_errorhandler(AuthorizationRequired)
def handle_authorization_required(e):
    flash(e.message)
    return _to_index()


@bp.app_errorhandler(NotFound)
def handle_not_found(e):
    flash(e.message)
    return _to_index()


@bp.app_errorhandler(OSError)
def handle_io_error(e):
    # Falha de disco: não recupera, mas mantém o processo servindo
    logger.error("Falha de E/S ao atender %s %s", request.method, request.path, exc_info=e)
    return render_template("error.html"), 500


# ===== Listagem e leitura =====
@bp.route("/")
def index():
    stores = _stores()
    entries = list(stores.documents.entries())
    documents = [e for e in entries if not e.is_image]
    images = [e for e in entries if e.is_image]
    versions = stores.history.load()
    with_history = {e.name for e in documents if versions.get(e.name)}
    return render_template(
        "index.html", documents=documents, images=images, with_history=with_history
    )


@bp.get("/<file_name>")
def view_file(file_name):
    content = _stores().documents.read(file_name)
    kind = classify(file_name)
    if is_markdown(file_name):
        body = render_markdown(content.decode("utf-8", errors="replace"))
        return render_template("document.html", file_name=file_name, body=body)
    if kind is FileKind.DOCUMENT:
        return Response(content, mimetype="text/plain")
    mime = mimetypes.guess_type(file_name)[0] if kind is FileKind.IMAGE else None
    return Response(content, mimetype=mime or "application/octet-stream")


# ===== Auth views =====
@bp.route("/users/signin", methods=["GET", "POST"])
def signin():
    if request.method == "POST":
        uname = request.form.get("username", "")
        pwd = request.form.get("password", "")
        try:
            current_gate().sign_in(_stores().credentials, uname, pwd)
        except AuthenticationFailed as e:
            flash(e.message)
            return render_template("signin.html", form_username=uname.strip()), 422
        flash("Welcome!")
        return _to_index()
    return render_template("signin.html")


@bp.post("/users/signout")
def signout():
    current_gate().sign_out()
    flash("You have been signed out.")
    return _to_index()


@bp.route("/users/signup", methods=["GET", "POST"])
def signup():
    if request.method == "POST":
        uname = request.form.get("username", "").strip()
        pwd = request.form.get("password", "")
        try:
            _stores().credentials.register(uname, pwd)
        except AlreadyExists as e:
            flash(e.message)
            return render_template("signup.html", form_username=uname), 422
        current_gate().sign_in_new_user(uname)
        flash(f"Welcome {uname}, our newest member!")
        return _to_index()
    return render_template("signup.html")


# ===== Criação e upload =====
@bp.route("/new", methods=["GET", "POST"])
@login_required
def new_document():
    if request.method == "POST":
        name = request.form.get("new_document", "")
        try:
            created = _stores().documents.create(name)
        except (InvalidName, AlreadyExists) as e:
            flash(e.message)
            return render_template("new.html", new_document=name), 422
        flash(f"{created} has been created.")
        return _to_index()
    return render_template("new.html")


@bp.route("/upload", methods=["GET", "POST"])
@login_required
def upload():
    if request.method == "POST":
        f = request.files.get("image")
        if not f or not f.filename:
            flash("Please choose an image to upload.")
            return render_template("upload.html"), 422
        try:
            # Mesma regra de nome do /new: nada de renomear em silêncio
            name = validate_name(f.filename, FileKind.IMAGE)
            saved = _stores().documents.create(name, f.read(), kind=FileKind.IMAGE)
        except (InvalidName, AlreadyExists) as e:
            flash(e.message)
            return render_template("upload.html"), 422
        flash(f"{saved} has been uploaded.")
        return _to_index()
    return render_template("upload.html")


# ===== Edição, remoção, duplicação e histórico =====
@bp.route("/<file_name>/edit", methods=["GET", "POST"])
@login_required
def edit(file_name):
    stores = _stores()
    try:
        ensure_editable(file_name)
    except InvalidName as e:
        flash(e.message)
        return _to_index()
    if request.method == "POST":
        edit_document(stores.documents, stores.history, file_name, request.form.get("contents", ""))
        flash(f"{file_name} has been updated.")
        return _to_index()
    file_body = stores.documents.read(file_name).decode("utf-8", errors="replace")
    return render_template("edit.html", file_name=file_name, file_body=file_body)


def _delete(file_name):
    _stores().documents.delete(file_name)
    flash(f"{file_name} has been deleted.")
    return _to_index()


@bp.post("/<file_name>/alter")
@login_required
def alter(file_name):
    if "delete" in request.form:
        return _delete(file_name)
    if not _stores().documents.exists(file_name):
        raise NotFound(f"{file_name} does not exist.")
    return redirect(url_for("cms.duplicate", file_name=file_name))


@bp.post("/<file_name>/delete")
@login_required
def delete(file_name):
    return _delete(file_name)


@bp.route("/<file_name>/duplicate", methods=["GET", "POST"])
@login_required
def duplicate(file_name):
    documents = _stores().documents
    if not documents.exists(file_name):
        raise NotFound(f"{file_name} does not exist.")
    if request.method == "POST":
        new_base = request.form.get("duplicate_document", "")
        try:
            target = documents.duplicate(file_name, new_base)
        except (InvalidName, AlreadyExists) as e:
            flash(e.message)
            return render_template("duplicate.html", file_name=file_name, duplicate_document=new_base), 422
        flash(f"A duplicate copy of {file_name} has been created as {target}.")
        return _to_index()
    return render_template("duplicate.html", file_name=file_name)


@bp.get("/<file_name>/history")
@login_required
def history(file_name):
    versions = _stores().history.history(file_name)
    return render_template("history.html", file_name=file_name, versions=versions)


def create_app(settings: Optional[Settings] = None) -> Flask:
    cfg = settings or Settings.from_env()
    _configure_logging(cfg.log_level)

    app = Flask(__name__, template_folder="templates", static_folder=None)
    app.config["SECRET_KEY"] = cfg.secret_key

    # Inicializa armazenamento e cria usuário admin caso não exista
    credentials, history_store = init_stores_and_seed_admin(cfg)
    app.extensions["cms"] = CMSStores(DocumentStore(cfg.content_dir), credentials, history_store)

    app.register_blueprint(bp)
    app.logger.info("CMS pronto. Conteúdo em %s", cfg.content_dir)
    return app


if __name__ == "__main__":
    settings = Settings.from_env()
    create_app(settings).run(host=settings.host, port=settings.port, debug=settings.debug)
