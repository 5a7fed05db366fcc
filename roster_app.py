# -*- coding: utf-8 -*-
# 직원 명부 (Google Sheets + Drive)

import base64
import logging
import time
from datetime import datetime

import pandas as pd
import pytz
import streamlit as st

from roster.config import FIELDS, HEADERS, load_config, secret
from roster.gsheet import ensure_tab, get_client, get_credentials, get_drive, open_sheet
from roster.photos import PhotoUploader
from roster.records import normalize_record
from roster.service import RosterService
from roster.settings import SettingsStore, SheetKeyValue
from roster.store import EmployeeStore

logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

# ────────────────────────────────────────────────────────────────
# Page config
# ────────────────────────────────────────────────────────────────
APP_TITLE = secret("app", "TITLE") or "HISMEDI † 직원 명부"
st.set_page_config(page_title=APP_TITLE, layout="wide")

st.markdown("""
<style>
  :where([data-testid="stAppViewContainer"]) .block-container { padding-top: 0.4rem !important; }
  .app-title-hero{ font-weight: 800; font-size: 1.6rem; line-height: 1.15; margin: .2rem 0 .6rem; }
  .stTabs [role='tab']{ font-weight:700 !important; }
</style>
""", unsafe_allow_html=True)

LABELS = dict(zip(FIELDS, HEADERS))


def kst_now_str():
    try:
        return datetime.now(tz=pytz.timezone("Asia/Seoul")).strftime("%Y-%m-%d %H:%M:%S (%Z)")
    except Exception:
        return datetime.now().strftime("%Y-%m-%d %H:%M:%S")


def _debounce_passed(name: str, wait: float, clicked: bool) -> bool:
    """Allow action once per 'wait' seconds per name; uses session_state only."""
    if not clicked:
        return False
    now = time.time()
    key = f"_debounce_{name}"
    last = float(st.session_state.get(key, 0.0) or 0.0)
    if now - last < float(wait):
        return False
    st.session_state[key] = now
    return True


# ═════════════════════════════════════════════════════════════════════════════
# Google Sheets / Drive
# ═════════════════════════════════════════════════════════════════════════════
@st.cache_resource(show_spinner=False)
def get_service() -> RosterService:
    cfg = load_config()
    creds = get_credentials()
    sh = open_sheet(get_client(creds), cfg.sheet_id)
    ws_emp = ensure_tab(sh, cfg.sheet_title, cols=len(HEADERS))
    ws_meta = ensure_tab(sh, cfg.meta_title, rows=100, cols=2)
    return RosterService(
        EmployeeStore(ws_emp),
        SettingsStore(SheetKeyValue(ws_meta)),
        PhotoUploader(get_drive(creds), cfg.photo_folder),
    )


@st.cache_data(ttl=120, show_spinner=False)
def load_employees() -> dict:
    return get_service().list_employees().to_envelope()


@st.cache_data(ttl=600, show_spinner=False)
def load_positions() -> list:
    return get_service().get_positions_list().get("positions", [])


def _refresh():
    load_employees.clear()
    load_positions.clear()


def _report(res):
    """Result → 화면 메시지. 성공이면 캐시를 비우고 다시 그린다."""
    if res.success:
        _refresh()
        st.session_state["_flash"] = res.get("message") or "저장되었습니다."
        st.rerun()
    else:
        st.error(f"[{res.kind.value}] {res.error}", icon="⚠️")


def _to_data_url(upload) -> str:
    mime = upload.type or "image/png"
    return f"data:{mime};base64," + base64.b64encode(upload.getvalue()).decode("ascii")


# ═════════════════════════════════════════════════════════════════════════════
# Dialogs
# ═════════════════════════════════════════════════════════════════════════════
def _employee_form(rec: dict, key: str) -> dict:
    rec = normalize_record(rec)
    positions = load_positions()
    c1, c2 = st.columns(2)
    out = {}
    with c1:
        out["empId"] = st.text_input(LABELS["empId"], value=rec["empId"], key=f"{key}_empId")
        out["firstName"] = st.text_input(LABELS["firstName"], value=rec["firstName"], key=f"{key}_first")
        out["phone"] = st.text_input(LABELS["phone"], value=rec["phone"], key=f"{key}_phone")
        if positions:
            opts = [""] + positions + ([rec["position"]] if rec["position"] and rec["position"] not in positions else [])
            out["position"] = st.selectbox(LABELS["position"], opts, index=opts.index(rec["position"]), key=f"{key}_pos")
        else:
            out["position"] = st.text_input(LABELS["position"], value=rec["position"], key=f"{key}_pos")
    with c2:
        out["lastName"] = st.text_input(LABELS["lastName"], value=rec["lastName"], key=f"{key}_last")
        out["email"] = st.text_input(LABELS["email"], value=rec["email"], key=f"{key}_email")
        out["status"] = st.text_input(LABELS["status"], value=rec["status"], key=f"{key}_status")
    out["note"] = st.text_area(LABELS["note"], value=rec["note"], key=f"{key}_note")
    out["photoUrl"] = rec["photoUrl"]

    if rec["photoUrl"]:
        st.image(rec["photoUrl"], width=120)
    up = st.file_uploader("사진", type=["png", "jpg", "jpeg", "gif", "webp"], key=f"{key}_photo")
    if up is not None:
        # 다시 그릴 때마다 재업로드되지 않도록 파일별로 결과를 기억
        memo_key, marker = f"{key}_photo_url", (up.name, up.size)
        memo = st.session_state.get(memo_key)
        if memo and memo[0] == marker:
            out["photoUrl"] = memo[1]
        else:
            res = get_service().upload_employee_photo(_to_data_url(up), up.name, out["empId"] or rec["empId"])
            if res.success:
                out["photoUrl"] = res.get("url", "")
                st.session_state[memo_key] = (marker, out["photoUrl"])
            else:
                st.error(f"[{res.kind.value}] {res.error}", icon="⚠️")
        if out["photoUrl"] != rec["photoUrl"]:
            st.caption(f"업로드 완료: {out['photoUrl']}")
    return out


@st.dialog("직원 추가", width="large")
def add_dialog():
    rec = _employee_form({}, "add")
    if st.button("추가", type="primary", use_container_width=True):
        _report(get_service().add_employee(rec))


@st.dialog("직원 수정", width="large")
def edit_dialog(rec: dict):
    original = rec.get("empId", "")
    new = _employee_form(rec, f"edit_{original}")
    if st.button("저장", type="primary", use_container_width=True):
        _report(get_service().update_employee(new, original))


@st.dialog("직원 삭제")
def delete_dialog(rec: dict):
    st.write(f"**{rec.get('empId','')}** {rec.get('lastName','')} {rec.get('firstName','')} 직원을 삭제할까요?")
    c1, c2 = st.columns(2)
    with c1:
        if st.button("삭제", type="primary", use_container_width=True):
            _report(get_service().delete_employee(rec.get("empId", "")))
    with c2:
        if st.button("취소", use_container_width=True):
            st.rerun()


@st.dialog("시트 초기화")
def notice_dialog(message: str):
    st.write(message)
    if st.button("확인", use_container_width=True):
        st.rerun()


# ═════════════════════════════════════════════════════════════════════════════
# Tabs
# ═════════════════════════════════════════════════════════════════════════════
def tab_list(employees: list, me: str):
    st.write(f"결과: **{len(employees):,}명**")
    q = st.text_input("검색(사번/이름/직책)", value="").strip().lower()
    view = [
        e for e in employees
        if not q or q in " ".join([e["empId"], e["firstName"], e["lastName"], e["position"]]).lower()
    ]

    df = pd.DataFrame(view, columns=FIELDS)
    if not df.empty:
        df.insert(0, "나", df["empId"].map(lambda v: "★" if me and v == me else ""))
    st.dataframe(
        df.rename(columns=LABELS),
        use_container_width=True,
        hide_index=True,
        height=480,
        column_config={"Photo URL": st.column_config.ImageColumn("Photo URL", width="small")},
    )

    c0, c1, c2 = st.columns([1, 2, 2], vertical_alignment="bottom")
    with c0:
        if st.button("➕ 직원 추가", use_container_width=True):
            add_dialog()
    with c1:
        ids = [e["empId"] for e in view]
        sel = st.selectbox("직원 선택", ["(선택)"] + ids, index=0, key="pick_emp")
    with c2:
        b1, b2 = st.columns(2)
        picked = next((e for e in view if e["empId"] == sel), None)
        with b1:
            if st.button("수정", use_container_width=True, disabled=picked is None):
                edit_dialog(picked)
        with b2:
            if st.button("삭제", use_container_width=True, disabled=picked is None):
                delete_dialog(picked)


def tab_bulk(employees: list):
    st.caption("표에서 직접 편집 후 저장하면 시트 전체를 다시 씁니다 (중복 사번도 그대로 저장됨).")
    df = pd.DataFrame(employees, columns=FIELDS)
    edited = st.data_editor(
        df,
        use_container_width=True,
        height=520,
        hide_index=True,
        num_rows="dynamic",
        column_config={f: st.column_config.TextColumn(LABELS[f]) for f in FIELDS},
        key="bulk_editor",
    )
    dup = edited["empId"].fillna("").astype(str).str.strip()
    dup = dup[(dup != "") & dup.duplicated()].unique().tolist()
    if dup:
        st.warning(f"중복 사번이 있습니다: {', '.join(dup)}", icon="⚠️")
    if st.button("전체 저장", type="primary", use_container_width=True):
        recs = edited.fillna("").astype(str).to_dict(orient="records")
        _report(get_service().save_all_employees(recs))


def tab_settings(employees: list, me: str):
    st.markdown("#### 직책 목록")
    positions = load_positions()
    txt = st.text_area("한 줄에 하나씩", value="\n".join(positions), height=200)
    if st.button("직책 저장", type="primary"):
        _report(get_service().save_positions_list(txt.split("\n")))

    st.markdown("#### 내 사번")
    ids = [""] + [e["empId"] for e in employees]
    if me and me not in ids:
        ids.append(me)
    pick = st.selectbox("나로 표시할 직원", ids, index=ids.index(me) if me in ids else 0)
    c1, c2 = st.columns(2)
    with c1:
        if st.button("저장", key="me_save", use_container_width=True):
            _report(get_service().set_me_employee_id(pick))
    with c2:
        if st.button("지우기", key="me_clear", use_container_width=True):
            _report(get_service().clear_me_employee_id())


# ═════════════════════════════════════════════════════════════════════════════
# Main App
# ═════════════════════════════════════════════════════════════════════════════
def main():
    try:
        svc = get_service()
    except Exception as e:
        st.error(f"구글시트 연결 실패: {e}")
        st.stop()

    with st.sidebar:
        st.markdown(f"<div class='app-title-hero'>{APP_TITLE}</div>", unsafe_allow_html=True)
        st.caption(f"DB연결 {kst_now_str()}")
        clicked_sync = st.button("🔄 동기화", use_container_width=True, help="캐시를 비우고 구글시트에서 다시 불러옵니다.")
        if _debounce_passed("__sync", 1.0, clicked_sync):
            _refresh()
        if st.button("🧱 시트 초기화", use_container_width=True):
            res = svc.initialize_sheet()
            if res.success:
                _refresh()
                notice_dialog(res.get("message", ""))
            else:
                notice_dialog(f"초기화 실패: {res.error}")

    flash = st.session_state.pop("_flash", None)
    if flash:
        st.success(flash, icon="✅")

    env = load_employees()
    if not env.get("success"):
        st.error(f"직원 목록을 불러오지 못했습니다: {env.get('error', '')}")
        load_employees.clear()
        st.stop()
    employees = env.get("employees", [])
    me = svc.get_me_employee_id().get("empId", "")

    tabs = st.tabs(["직원 목록", "일괄 편집", "설정"])
    with tabs[0]:
        tab_list(employees, me)
    with tabs[1]:
        tab_bulk(employees)
    with tabs[2]:
        tab_settings(employees, me)


if __name__ == "__main__":
    main()
