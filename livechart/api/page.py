"""
Browser side of the chart: Lightweight Charts fed by the /ws stream.

Candles + a volume histogram on its own hidden price scale.
"series"/"volume_series" messages replace the data, "bar"/"volume" update the latest point.
"""

INDEX_HTML = r"""
<!doctype html>
<html>
<head>
  <meta charset="utf-8"/>
  <meta name="viewport" content="width=device-width, initial-scale=1"/>
  <title>Live Chart</title>
  <script src="https://unpkg.com/lightweight-charts@4/dist/lightweight-charts.standalone.production.js"></script>
  <style>
    body { margin: 0; font-family: sans-serif; }
    #status { padding: 4px 8px; font-size: 12px; color: #666; }
  </style>
</head>
<body>
  <div id="status">connecting...</div>
  <div id="chart"></div>
  <script>
    const UP_COLOR = 'rgba(0, 150, 136, 0.8)';
    const DOWN_COLOR = 'rgba(255,82,82, 0.8)';

    const container = document.getElementById('chart');
    const statusEl = document.getElementById('status');

    const chart = LightweightCharts.createChart(container, {
      width: container.clientWidth,
      height: 600,
      layout: { background: { color: '#ffffff' }, textColor: '#000' },
      grid: { vertLines: { color: '#e0e0e0' }, horzLines: { color: '#e0e0e0' } },
      crosshair: { mode: LightweightCharts.CrosshairMode.Normal },
      rightPriceScale: { scaleMargins: { top: 0.2, bottom: 0.2 } },
      timeScale: { timeVisible: true, secondsVisible: true },
    });

    const candleSeries = chart.addCandlestickSeries();
    const volumeSeries = chart.addHistogramSeries({
      priceFormat: { type: 'volume' },
      priceScaleId: 'volume',
    });
    chart.priceScale('volume').applyOptions({
      scaleMargins: { top: 0.8, bottom: 0 },
      visible: false,
    });

    const colored = (p) => ({
      time: p.time,
      value: p.value,
      color: p.color === 'up' ? UP_COLOR : DOWN_COLOR,
    });

    window.addEventListener('resize', () => {
      chart.applyOptions({ width: container.clientWidth });
    });

    function connect() {
      const proto = location.protocol === 'https:' ? 'wss' : 'ws';
      const ws = new WebSocket(`${proto}://${location.host}/ws`);
      ws.onopen = () => { statusEl.textContent = 'live'; };
      ws.onclose = () => {
        statusEl.textContent = 'disconnected, retrying...';
        setTimeout(connect, 1000);
      };
      ws.onmessage = (ev) => {
        const msg = JSON.parse(ev.data);
        if (msg.type === 'series') candleSeries.setData(msg.bars);
        else if (msg.type === 'volume_series') volumeSeries.setData(msg.volume.map(colored));
        else if (msg.type === 'bar') candleSeries.update(msg.bar);
        else if (msg.type === 'volume') volumeSeries.update(colored(msg.volume));
      };
    }
    connect();
  </script>
</body>
</html>
"""
