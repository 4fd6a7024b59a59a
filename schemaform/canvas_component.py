"""
Streamlit canvas component for region-draw fields.

The component only draws what it is given and reports pointer input; the
RegionSurface in Python decides what the input means. A gesture (or a single
click in click mode) is posted back as one batch ``{"batch_id", "events"}``
with coordinates relative to the canvas origin.
"""

from __future__ import annotations

import tempfile
from pathlib import Path
from typing import Any, Dict, List, Optional
import logging

import streamlit.components.v1 as components

logger = logging.getLogger(__name__)

_COMPONENT = None

_BASE = Path(tempfile.gettempdir()) / "schemaform_region_canvas_v1"


def region_canvas(shapes: List[Dict[str, Any]], width: int, height: int,
                  mode: str = "drag", key: Optional[str] = None) -> Optional[Dict[str, Any]]:
    """
    Render the drawing canvas.

    Args:
        shapes: Output of RegionSurface.shapes()
        width: Canvas width in pixels
        height: Canvas height in pixels
        mode: 'drag' or 'click'
        key: Streamlit widget key

    Returns:
        The last event batch posted by the browser, or None
    """
    _ensure_component()
    return _COMPONENT(shapes=shapes, width=width, height=height, mode=mode, default=None, key=key)  # type: ignore[misc]


def _ensure_component() -> None:
    global _COMPONENT
    if _COMPONENT is not None:
        return

    _BASE.mkdir(parents=True, exist_ok=True)
    (_BASE / "index.html").write_text(_index_html(), encoding="utf-8")
    _COMPONENT = components.declare_component("schemaform_region_canvas", path=str(_BASE))
    logger.debug(f"Declared region canvas component from {_BASE}")


def _index_html() -> str:
    return r"""<!doctype html>
<html>
<head>
<meta charset="utf-8" />
<style>
  html, body { margin:0; padding:0; background:transparent; font-family: system-ui; }
  canvas { border:1px solid #ccc; background:#fff; touch-action:none; cursor:crosshair; }
  .bar { margin-top:4px; font-size:12px; color:#555; }
  .btn { margin-left:8px; font-size:12px; }
</style>
</head>
<body>
<canvas id="cv" width="400" height="200"></canvas>
<div class="bar"><span id="hint"></span><button class="btn" id="finish" style="display:none">Finish region</button></div>

<script>
const API=1;
const post=(type,extra)=>window.parent.postMessage(Object.assign({isStreamlitMessage:true,type,apiVersion:API},extra||{}),"*");
post("streamlit:componentReady");
const setH=h=>post("streamlit:setFrameHeight",{height:h});
const setV=v=>post("streamlit:setComponentValue",{value:v});

const cv=document.getElementById("cv");
const ctx=cv.getContext("2d");
const hint=document.getElementById("hint");
const finishBtn=document.getElementById("finish");

let shapes=[], mode="drag", pressed=false, gesture=[], counter=0;

const send=(events)=>{
  counter+=1;
  setV({batch_id: Date.now()+"-"+counter, events: events});
};

const pos=(e)=>{
  const r=cv.getBoundingClientRect();
  return {x:e.clientX-r.left, y:e.clientY-r.top};
};

function drawShape(s, color){
  const pts=s.points||[];
  if(!pts.length) return;
  ctx.strokeStyle=color; ctx.fillStyle=color;
  ctx.lineWidth=s.selected?3:1.5;
  ctx.beginPath();
  ctx.moveTo(pts[0][0],pts[0][1]);
  for(const p of pts) ctx.lineTo(p[0],p[1]);
  if(s.closed) ctx.lineTo(pts[0][0],pts[0][1]);
  ctx.stroke();
  for(const p of pts){ ctx.beginPath(); ctx.arc(p[0],p[1],2,0,2*Math.PI); ctx.fill(); }
  if(s.label){
    ctx.fillStyle="#000"; ctx.font="12px Arial";
    const w=ctx.measureText(s.label).width;
    ctx.fillText(s.label, Math.min(pts[0][0]+5, cv.width-w-5), Math.max(pts[0][1]-5, 12));
  }
}

function redraw(){
  ctx.clearRect(0,0,cv.width,cv.height);
  for(const s of shapes) drawShape(s, s.color);
  if(gesture.length){
    const pts=gesture.filter(e=>e.type!=="up").map(e=>[e.x,e.y]);
    drawShape({points:pts, closed:false}, "#FF0000");
  }
}

cv.addEventListener("pointerdown",(e)=>{
  const p=pos(e);
  if(mode==="click"){ send([{type:"down",x:p.x,y:p.y}]); return; }
  pressed=true;
  cv.setPointerCapture(e.pointerId);
  gesture=[{type:"down",x:p.x,y:p.y}];
  redraw();
});

cv.addEventListener("pointermove",(e)=>{
  if(!pressed||mode==="click") return;
  const p=pos(e), last=gesture[gesture.length-1];
  if(Math.hypot(p.x-last.x,p.y-last.y)<1) return;
  gesture.push({type:"move",x:p.x,y:p.y});
  redraw();
});

const release=()=>{
  if(!pressed) return;
  pressed=false;
  gesture.push({type:"up",x:0,y:0});
  send(gesture);
};
cv.addEventListener("pointerup",release);
cv.addEventListener("pointerleave",release);

finishBtn.addEventListener("click",()=>send([{type:"finish",x:0,y:0}]));

addEventListener("message",(e)=>{
  const m=e.data;
  if(!m||m.type!=="streamlit:render") return;
  const a=m.args||{};
  cv.width=+a.width||400; cv.height=+a.height||200;
  mode=a.mode==="click"?"click":"drag";
  shapes=Array.isArray(a.shapes)?a.shapes:[];
  gesture=[];
  finishBtn.style.display=mode==="click"?"inline-block":"none";
  hint.textContent=mode==="click"
    ? "Click to add points; click near the first point to close the region."
    : "Press and drag to draw; return to the start point to close the region.";
  redraw();
  setH(cv.height+34);
});
</script>
</body>
</html>
"""
