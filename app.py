from __future__ import annotations

from pathlib import Path

from pandas.errors import EmptyDataError
import streamlit as st

from load_planner import (
    build_placement_rows,
    build_solution_summary,
    configure_logging,
    generate_solutions,
    load_cargo_csv,
    load_settings,
    normalize_cargo_rows,
    parse_container_yaml,
)
from load_planner.advisory import collect_warnings
from load_planner.reporting import build_container_rows, build_unpacked_rows

DATA_DIR = Path(__file__).parent / "data"

st.set_page_config(page_title="コンテナ積付けプランナー", layout="wide")
st.title("コンテナ積付けプランナー")
st.caption("貨物リストとコンテナ仕様から、コスト優先・作業効率優先の2つの積付け案を作成します。")


def _read_text(name: str) -> str:
    return (DATA_DIR / name).read_text(encoding="utf-8")


def _render_solution(solution):
    st.subheader(solution.name)
    st.caption(solution.description)
    col1, col2, col3 = st.columns(3)
    col1.metric("総運賃", f"{solution.total_cost:,}")
    col2.metric("コンテナ本数", solution.container_count)
    col3.metric("容積使用率", f"{float(solution.total_volume_util) * 100:.1f}%")

    st.markdown("**コンテナ別使用率**")
    st.dataframe(build_container_rows(solution), use_container_width=True)

    placements = build_placement_rows(solution)
    st.markdown("**配置一覧**")
    st.dataframe(placements, use_container_width=True)
    st.download_button(
        f"{solution.id} 配置CSVダウンロード",
        data=placements.to_csv(index=False).encode("utf-8-sig"),
        file_name=f"{solution.id.lower()}_placements.csv",
        use_container_width=True,
    )

    if solution.unpacked:
        st.markdown("**積み残し貨物**")
        st.dataframe(build_unpacked_rows(solution), use_container_width=True)
    else:
        st.success("積み残し貨物はありません")


with st.sidebar:
    st.header("入力")
    cargo_file = st.file_uploader("貨物CSVアップロード", type=["csv"], key="cargo")
    cargo_text = st.text_area("貨物CSVテキスト貼り付け", value=_read_text("cargo.sample.csv"), height=200)
    container_file = st.file_uploader("containers.yamlアップロード", type=["yaml", "yml"], key="container")
    container_text = st.text_area(
        "containers.yamlテキスト貼り付け", value=_read_text("containers.sample.yaml"), height=260
    )
    execute_clicked = st.button("積付け案を作成", type="primary", use_container_width=True)

if not execute_clicked:
    st.info("サイドバーで貨物リストとコンテナ仕様を確認し、「積付け案を作成」を押してください。")
    st.stop()

containers_yaml = container_file.getvalue().decode("utf-8") if container_file is not None else container_text
cargo_csv = cargo_file.getvalue().decode("utf-8") if cargo_file is not None else cargo_text

try:
    settings = load_settings(containers_yaml)
    configure_logging(settings.log_level)
    containers = parse_container_yaml(containers_yaml)
    cargo = normalize_cargo_rows(load_cargo_csv(cargo_csv))
    solutions = generate_solutions(cargo, containers, settings=settings)
except EmptyDataError:
    st.error("貨物CSVが空です")
    st.stop()
except ValueError as exc:
    st.error(f"入力エラー: {exc}")
    st.stop()

for message in collect_warnings(solutions, cargo, containers):
    st.warning(message)

st.header("比較")
summary = build_solution_summary(solutions)
st.dataframe(summary, use_container_width=True)

tabs = st.tabs([solution.name for solution in solutions])
for tab, solution in zip(tabs, solutions):
    with tab:
        _render_solution(solution)

st.download_button(
    "比較表CSVダウンロード",
    data=summary.to_csv(index=False).encode("utf-8-sig"),
    file_name="solutions_summary.csv",
    use_container_width=True,
)
