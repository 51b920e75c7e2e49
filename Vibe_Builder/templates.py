"""
Deterministic fallback app synthesis

Used whenever the model call fails, times out or returns unusable output.
Everything here is pure: same (request, category) in, same description out.

Templates use {{name}} placeholders. User text only ever enters a template as
a JSON string literal ({{idea_js}}) so it cannot break the generated source.
"""

import re
import json

from .models import AppCategory, GeneratedAppDescription, GenerationRequest, layout_columns


_PLACEHOLDER = re.compile(r"\{\{(\w+)\}\}")

DEFAULT_TITLE = "Vibe App"

FALLBACK_TITLES = {
    AppCategory.TODO: "Smart Todo Manager",
    AppCategory.WEATHER: "Weather Dashboard",
    AppCategory.HABIT_TRACKER: "Habit Tracker Pro",
    AppCategory.RECIPE: "Recipe Collection",
    AppCategory.NOTES: "Notes App",
    AppCategory.AUDIO_TRACKER: "Audio Logger",
    AppCategory.TIMER: "Focus Timer",
    AppCategory.CALCULATOR: "Smart Calculator",
    AppCategory.CALENDAR: "Event Calendar",
    AppCategory.BUDGET: "Budget Planner",
    AppCategory.PRODUCTIVITY: "Productivity Hub",
}

DEFAULT_FEATURES = ["Modern Design", "Responsive Layout", "Interactive UI"]

APP_FEATURES = {
    AppCategory.TODO: ["Add/Edit Tasks", "Mark Complete", "Filter Views", "Search"],
    AppCategory.WEATHER: ["Current Weather", "5-Day Forecast", "City Search", "Unit Toggle"],
    AppCategory.HABIT_TRACKER: ["Daily Tracking", "Streak Counter", "Progress Charts", "Add Habits"],
    AppCategory.RECIPE: ["Recipe Cards", "Ingredient Lists", "Search Recipes", "Favorites"],
    AppCategory.AUDIO_TRACKER: ["Audio Detection", "Species Library", "Logging", "Analytics"],
    AppCategory.PRODUCTIVITY: ["Dashboard", "Task Management", "Analytics", "Quick Actions"],
}

DEFAULT_PALETTE = "playful"

THEME_PALETTES = {
    "minimal": {
        "bg": "from-gray-50 to-white",
        "text": "text-gray-900",
        "card": "bg-white border border-gray-200",
        "button": "bg-gray-900 text-white hover:bg-gray-800",
        "accent": "text-gray-600",
    },
    "playful": {
        "bg": "from-pink-100 via-purple-50 to-indigo-100",
        "text": "text-purple-900",
        "card": "bg-white/80 backdrop-blur-sm border border-purple-200",
        "button": "bg-purple-600 text-white hover:bg-purple-700",
        "accent": "text-purple-600",
    },
    "professional": {
        "bg": "from-blue-50 to-indigo-100",
        "text": "text-blue-900",
        "card": "bg-white border border-blue-200",
        "button": "bg-blue-600 text-white hover:bg-blue-700",
        "accent": "text-blue-600",
    },
    "artistic": {
        "bg": "from-amber-100 via-rose-100 to-violet-200",
        "text": "text-rose-900",
        "card": "bg-white/70 backdrop-blur-sm border border-rose-200",
        "button": "bg-rose-500 text-white hover:bg-rose-600",
        "accent": "text-amber-700",
    },
    "techy": {
        "bg": "from-slate-950 via-gray-900 to-emerald-950",
        "text": "text-emerald-300",
        "card": "bg-gray-900/80 border border-emerald-500/40",
        "button": "bg-emerald-500 text-gray-950 hover:bg-emerald-400",
        "accent": "text-cyan-400",
    },
}


TODO_APP = """import React, { useState } from 'react';
import { Plus, Check, X, Search } from 'lucide-react';

interface Todo {
  id: number;
  text: string;
  completed: boolean;
}

type Filter = 'all' | 'active' | 'completed';

const IDEA = {{idea_js}};

export default function TodoApp() {
  const [todos, setTodos] = useState<Record<number, Todo>>({
    1: { id: 1, text: 'Plan morning routine', completed: false },
    2: { id: 2, text: 'Review weekly goals', completed: true },
    3: { id: 3, text: 'Organize workspace', completed: false }
  });
  const [newTodo, setNewTodo] = useState('');
  const [filter, setFilter] = useState<Filter>('all');
  const [searchTerm, setSearchTerm] = useState('');

  const addTodo = () => {
    const text = newTodo.trim();
    if (!text) return;
    const id = Date.now();
    setTodos({ ...todos, [id]: { id, text, completed: false } });
    setNewTodo('');
  };

  const toggleTodo = (id: number) => {
    const todo = todos[id];
    if (!todo) return;
    setTodos({ ...todos, [id]: { ...todo, completed: !todo.completed } });
  };

  const deleteTodo = (id: number) => {
    const { [id]: _removed, ...rest } = todos;
    setTodos(rest);
  };

  const allTodos = Object.values(todos);
  const visibleTodos = allTodos
    .filter(todo => filter === 'all' || (filter === 'completed' ? todo.completed : !todo.completed))
    .filter(todo => todo.text.toLowerCase().includes(searchTerm.toLowerCase()));
  const completedCount = allTodos.filter(todo => todo.completed).length;

  return (
    <div className="min-h-screen bg-gradient-to-br {{theme_bg}} p-8">
      <div className="max-w-4xl mx-auto">
        <header className="text-center mb-8">
          <h1 className="text-4xl font-bold {{theme_text}} mb-2">{{title}}</h1>
          <p className="{{theme_accent}} text-lg">{IDEA}</p>
          <div className="mt-4 {{theme_accent}}">
            {completedCount} of {allTodos.length} tasks completed
          </div>
        </header>

        <div className="{{theme_card}} rounded-xl p-6 shadow-lg mb-6 flex gap-3">
          <input
            type="text"
            value={newTodo}
            onChange={(e) => setNewTodo(e.target.value)}
            onKeyDown={(e) => e.key === 'Enter' && addTodo()}
            placeholder="Add a new task..."
            className="flex-1 px-4 py-2 border border-gray-300 rounded-lg"
          />
          <button onClick={addTodo} className="{{theme_button}} px-6 py-2 rounded-lg font-medium flex items-center gap-2">
            <Plus className="w-4 h-4" />
            Add Task
          </button>
        </div>

        <div className="{{theme_card}} rounded-xl p-4 shadow-lg mb-6 flex flex-col md:flex-row gap-4 items-center">
          <div className="relative flex-1 w-full">
            <Search className="absolute left-3 top-1/2 -translate-y-1/2 text-gray-400 w-4 h-4" />
            <input
              type="text"
              value={searchTerm}
              onChange={(e) => setSearchTerm(e.target.value)}
              placeholder="Search tasks..."
              className="w-full pl-10 pr-4 py-2 border border-gray-300 rounded-lg"
            />
          </div>
          <div className="flex gap-2">
            {(['all', 'active', 'completed'] as const).map(filterType => (
              <button
                key={filterType}
                onClick={() => setFilter(filterType)}
                className={`px-4 py-2 rounded-lg font-medium capitalize ${
                  filter === filterType ? '{{theme_button}}' : 'bg-gray-100 text-gray-700 hover:bg-gray-200'
                }`}
              >
                {filterType}
              </button>
            ))}
          </div>
        </div>

        <div className="grid grid-cols-1 md:grid-cols-{{columns}} gap-3">
          {visibleTodos.map(todo => (
            <div key={todo.id} className={`{{theme_card}} rounded-xl p-4 shadow-lg ${todo.completed ? 'opacity-75' : ''}`}>
              <div className="flex items-center gap-3">
                <button
                  onClick={() => toggleTodo(todo.id)}
                  className={`w-6 h-6 rounded-full border-2 flex items-center justify-center ${
                    todo.completed ? 'bg-green-500 border-green-500 text-white' : 'border-gray-300'
                  }`}
                >
                  {todo.completed && <Check className="w-4 h-4" />}
                </button>
                <span className={`flex-1 ${todo.completed ? 'line-through text-gray-500' : '{{theme_text}}'}`}>
                  {todo.text}
                </span>
                <button onClick={() => deleteTodo(todo.id)} className="text-red-500 hover:text-red-700 p-1 rounded">
                  <X className="w-4 h-4" />
                </button>
              </div>
            </div>
          ))}
        </div>

        {visibleTodos.length === 0 && (
          <div className="{{theme_card}} rounded-xl p-8 shadow-lg text-center {{theme_accent}}">
            {searchTerm ? 'No tasks match your search.' : 'No tasks found. Add one above!'}
          </div>
        )}
      </div>
    </div>
  );
}
"""


WEATHER_APP = """import React, { useState } from 'react';
import { Search, MapPin, Thermometer, Droplets, Wind, Sun, Cloud, CloudRain } from 'lucide-react';

interface Forecast {
  day: string;
  high: number;
  low: number;
  condition: string;
  icon: 'sun' | 'cloud' | 'rain';
}

const IDEA = {{idea_js}};

const FORECAST: Forecast[] = [
  { day: 'Today', high: 75, low: 62, condition: 'Sunny', icon: 'sun' },
  { day: 'Tomorrow', high: 73, low: 59, condition: 'Cloudy', icon: 'cloud' },
  { day: 'Tuesday', high: 68, low: 55, condition: 'Rain', icon: 'rain' },
  { day: 'Wednesday', high: 71, low: 58, condition: 'Partly Cloudy', icon: 'cloud' },
  { day: 'Thursday', high: 76, low: 63, condition: 'Sunny', icon: 'sun' }
];

export default function WeatherApp() {
  const [city, setCity] = useState('San Francisco');
  const [cityInput, setCityInput] = useState('');
  const [temperature, setTemperature] = useState(72);
  const [isMetric, setIsMetric] = useState(false);

  const convertTemp = (tempF: number) => (isMetric ? Math.round((tempF - 32) * 5 / 9) : tempF);
  const unit = isMetric ? '°C' : '°F';

  const searchWeather = () => {
    const name = cityInput.trim();
    if (!name) return;
    setCity(name);
    setTemperature(50 + (name.length * 7) % 40);
    setCityInput('');
  };

  const weatherIcon = (icon: Forecast['icon']) => {
    if (icon === 'rain') return <CloudRain className="w-8 h-8 text-blue-500" />;
    if (icon === 'cloud') return <Cloud className="w-8 h-8 text-gray-500" />;
    return <Sun className="w-8 h-8 text-yellow-500" />;
  };

  return (
    <div className="min-h-screen bg-gradient-to-br {{theme_bg}} p-8">
      <div className="max-w-6xl mx-auto">
        <header className="text-center mb-8">
          <h1 className="text-4xl font-bold {{theme_text}} mb-2">{{title}}</h1>
          <p className="{{theme_accent}} text-lg">{IDEA}</p>
        </header>

        <div className="{{theme_card}} rounded-xl p-6 shadow-lg mb-8 flex flex-col md:flex-row gap-4 items-center">
          <div className="relative flex-1 w-full">
            <Search className="absolute left-3 top-1/2 -translate-y-1/2 text-gray-400 w-5 h-5" />
            <input
              type="text"
              name="city"
              value={cityInput}
              onChange={(e) => setCityInput(e.target.value)}
              onKeyDown={(e) => e.key === 'Enter' && searchWeather()}
              placeholder="Search for a city..."
              className="w-full pl-12 pr-4 py-3 border border-gray-300 rounded-lg text-lg"
            />
          </div>
          <button onClick={searchWeather} className="{{theme_button}} px-6 py-3 rounded-lg font-medium">
            Search
          </button>
          <button
            onClick={() => setIsMetric(!isMetric)}
            className="bg-gray-100 text-gray-700 hover:bg-gray-200 px-4 py-3 rounded-lg font-medium"
          >
            {unit}
          </button>
        </div>

        <div className="{{theme_card}} rounded-xl p-8 shadow-lg mb-8">
          <div className="flex items-center justify-between mb-6">
            <div className="flex items-center gap-3">
              <MapPin className="w-6 h-6 {{theme_accent}}" />
              <h2 className="text-2xl font-bold {{theme_text}}">{city}</h2>
            </div>
            <div className="text-4xl font-bold {{theme_text}}">
              {convertTemp(temperature)}{unit}
            </div>
          </div>
          <div className="grid grid-cols-1 md:grid-cols-3 gap-6">
            <div className="flex items-center gap-3 p-4 bg-gray-50 rounded-lg">
              <Thermometer className="w-6 h-6 text-red-500" />
              <span className="{{theme_accent}}">Feels like {convertTemp(temperature - 2)}{unit}</span>
            </div>
            <div className="flex items-center gap-3 p-4 bg-gray-50 rounded-lg">
              <Droplets className="w-6 h-6 text-blue-500" />
              <span className="{{theme_accent}}">Humidity 65%</span>
            </div>
            <div className="flex items-center gap-3 p-4 bg-gray-50 rounded-lg">
              <Wind className="w-6 h-6 text-gray-500" />
              <span className="{{theme_accent}}">Wind 8 mph</span>
            </div>
          </div>
        </div>

        <div className="{{theme_card}} rounded-xl p-8 shadow-lg">
          <h3 className="text-xl font-bold {{theme_text}} mb-6">5-Day Forecast</h3>
          <div className="grid grid-cols-1 md:grid-cols-5 gap-4">
            {FORECAST.map(day => (
              <div key={day.day} className="text-center p-4 bg-gray-50 rounded-lg">
                <div className="font-semibold {{theme_text}} mb-2">{day.day}</div>
                <div className="flex justify-center mb-2">{weatherIcon(day.icon)}</div>
                <div className="text-sm {{theme_accent}} mb-2">{day.condition}</div>
                <div className="flex justify-center gap-2">
                  <span className="font-semibold {{theme_text}}">{convertTemp(day.high)}°</span>
                  <span className="{{theme_accent}}">{convertTemp(day.low)}°</span>
                </div>
              </div>
            ))}
          </div>
        </div>
      </div>
    </div>
  );
}
"""


HABIT_APP = """import React, { useState } from 'react';
import { Plus, Check, Flame, Target } from 'lucide-react';

interface Habit {
  id: number;
  name: string;
  streak: number;
  completedToday: boolean;
  completedDays: number;
  totalDays: number;
}

const IDEA = {{idea_js}};

export default function HabitApp() {
  const [habits, setHabits] = useState<Habit[]>([
    { id: 1, name: 'Morning Meditation', streak: 7, completedToday: true, completedDays: 25, totalDays: 30 },
    { id: 2, name: 'Read for 30 minutes', streak: 3, completedToday: false, completedDays: 18, totalDays: 30 },
    { id: 3, name: 'Exercise', streak: 5, completedToday: true, completedDays: 22, totalDays: 30 }
  ]);
  const [newHabit, setNewHabit] = useState('');

  const addHabit = () => {
    const name = newHabit.trim();
    if (!name) return;
    setHabits([...habits, { id: Date.now(), name, streak: 0, completedToday: false, completedDays: 0, totalDays: 1 }]);
    setNewHabit('');
  };

  const toggleHabit = (id: number) => {
    setHabits(habits.map(habit => {
      if (habit.id !== id) return habit;
      const done = !habit.completedToday;
      return {
        ...habit,
        completedToday: done,
        streak: done ? habit.streak + 1 : Math.max(0, habit.streak - 1),
        completedDays: done ? habit.completedDays + 1 : Math.max(0, habit.completedDays - 1)
      };
    }));
  };

  const completionRate = (habit: Habit) => Math.round((habit.completedDays / habit.totalDays) * 100);
  const doneToday = habits.filter(habit => habit.completedToday).length;

  return (
    <div className="min-h-screen bg-gradient-to-br {{theme_bg}} p-8">
      <div className="max-w-5xl mx-auto">
        <header className="text-center mb-8">
          <h1 className="text-4xl font-bold {{theme_text}} mb-2">{{title}}</h1>
          <p className="{{theme_accent}} text-lg">{IDEA}</p>
          <div className="mt-4 flex justify-center items-center gap-2 {{theme_accent}}">
            <Target className="w-5 h-5" />
            {doneToday} of {habits.length} habits done today
          </div>
        </header>

        <div className="{{theme_card}} rounded-xl p-6 shadow-lg mb-6 flex gap-3">
          <input
            type="text"
            value={newHabit}
            onChange={(e) => setNewHabit(e.target.value)}
            onKeyDown={(e) => e.key === 'Enter' && addHabit()}
            placeholder="Add a new habit..."
            className="flex-1 px-4 py-2 border border-gray-300 rounded-lg"
          />
          <button onClick={addHabit} className="{{theme_button}} px-6 py-2 rounded-lg font-medium flex items-center gap-2">
            <Plus className="w-4 h-4" />
            Add Habit
          </button>
        </div>

        <div className="grid grid-cols-1 md:grid-cols-{{columns}} gap-4">
          {habits.map(habit => (
            <div key={habit.id} className="{{theme_card}} rounded-xl p-6 shadow-lg">
              <div className="flex items-center justify-between mb-4">
                <h3 className="font-semibold {{theme_text}}">{habit.name}</h3>
                <button
                  onClick={() => toggleHabit(habit.id)}
                  className={`w-8 h-8 rounded-full border-2 flex items-center justify-center ${
                    habit.completedToday ? 'bg-green-500 border-green-500 text-white' : 'border-gray-300'
                  }`}
                >
                  {habit.completedToday && <Check className="w-5 h-5" />}
                </button>
              </div>
              <div className="flex items-center gap-2 mb-3 {{theme_accent}}">
                <Flame className="w-4 h-4 text-orange-500" />
                {habit.streak} day streak
              </div>
              <div className="w-full bg-gray-200 rounded-full h-2">
                <div className="bg-green-500 h-2 rounded-full" style={{ width: `${completionRate(habit)}%` }} />
              </div>
              <div className="text-sm {{theme_accent}} mt-2">{completionRate(habit)}% this month</div>
            </div>
          ))}
        </div>
      </div>
    </div>
  );
}
"""


AUDIO_TRACKER_APP = """import React, { useEffect, useState } from 'react';
import { Mic, MicOff, Bird, Clock } from 'lucide-react';

interface Detection {
  id: number;
  species: string;
  confidence: number;
  at: string;
}

const IDEA = {{idea_js}};
const SPECIES = ['American Robin', 'Northern Cardinal', 'Blue Jay', 'Song Sparrow', 'Black-capped Chickadee'];

export default function AudioTrackerApp() {
  const [isRecording, setIsRecording] = useState(false);
  const [elapsed, setElapsed] = useState(0);
  const [detections, setDetections] = useState<Detection[]>([
    { id: 1, species: 'American Robin', confidence: 92, at: '07:14' },
    { id: 2, species: 'Blue Jay', confidence: 87, at: '07:32' }
  ]);

  useEffect(() => {
    if (!isRecording) return;
    const timer = setInterval(() => setElapsed(seconds => seconds + 1), 1000);
    return () => clearInterval(timer);
  }, [isRecording]);

  const toggleRecording = () => {
    if (isRecording) {
      const species = SPECIES[elapsed % SPECIES.length];
      const now = new Date();
      setDetections([
        { id: Date.now(), species, confidence: 70 + (elapsed % 30), at: now.toTimeString().slice(0, 5) },
        ...detections
      ]);
    } else {
      setElapsed(0);
    }
    setIsRecording(!isRecording);
  };

  const formatTime = (seconds: number) =>
    `${Math.floor(seconds / 60).toString().padStart(2, '0')}:${(seconds % 60).toString().padStart(2, '0')}`;

  return (
    <div className="min-h-screen bg-gradient-to-br {{theme_bg}} p-8">
      <div className="max-w-5xl mx-auto">
        <header className="text-center mb-8">
          <h1 className="text-4xl font-bold {{theme_text}} mb-2">{{title}}</h1>
          <p className="{{theme_accent}} text-lg">{IDEA}</p>
        </header>

        <div className="{{theme_card}} rounded-xl p-8 shadow-lg mb-8 text-center">
          <button
            onClick={toggleRecording}
            className={`w-24 h-24 rounded-full flex items-center justify-center mx-auto mb-4 ${
              isRecording ? 'bg-red-500 text-white animate-pulse' : '{{theme_button}}'
            }`}
          >
            {isRecording ? <MicOff className="w-10 h-10" /> : <Mic className="w-10 h-10" />}
          </button>
          <div className="text-3xl font-mono {{theme_text}}">{formatTime(elapsed)}</div>
          <div className="{{theme_accent}}">{isRecording ? 'Listening...' : 'Tap to start recording'}</div>
        </div>

        <div className="grid grid-cols-1 md:grid-cols-{{columns}} gap-4">
          {detections.map(detection => (
            <div key={detection.id} className="{{theme_card}} rounded-xl p-4 shadow-lg flex items-center gap-4">
              <Bird className="w-8 h-8 {{theme_accent}}" />
              <div className="flex-1">
                <div className="font-semibold {{theme_text}}">{detection.species}</div>
                <div className="text-sm {{theme_accent}} flex items-center gap-1">
                  <Clock className="w-3 h-3" /> {detection.at}
                </div>
              </div>
              <div className="text-lg font-bold {{theme_text}}">{detection.confidence}%</div>
            </div>
          ))}
        </div>
      </div>
    </div>
  );
}
"""


TIMER_APP = """import React, { useEffect, useState } from 'react';
import { Play, Pause, RotateCcw } from 'lucide-react';

const IDEA = {{idea_js}};
const PRESETS = [
  { label: 'Focus', minutes: 25 },
  { label: 'Short Break', minutes: 5 },
  { label: 'Long Break', minutes: 15 }
];

export default function TimerApp() {
  const [duration, setDuration] = useState(PRESETS[0].minutes * 60);
  const [remaining, setRemaining] = useState(PRESETS[0].minutes * 60);
  const [running, setRunning] = useState(false);
  const [sessions, setSessions] = useState<string[]>([]);

  useEffect(() => {
    if (!running) return;
    const timer = setInterval(() => {
      setRemaining(seconds => {
        if (seconds <= 1) {
          setRunning(false);
          setSessions(done => [new Date().toLocaleTimeString(), ...done]);
          return 0;
        }
        return seconds - 1;
      });
    }, 1000);
    return () => clearInterval(timer);
  }, [running]);

  const selectPreset = (minutes: number) => {
    setRunning(false);
    setDuration(minutes * 60);
    setRemaining(minutes * 60);
  };

  const reset = () => {
    setRunning(false);
    setRemaining(duration);
  };

  const minutes = Math.floor(remaining / 60).toString().padStart(2, '0');
  const seconds = (remaining % 60).toString().padStart(2, '0');

  return (
    <div className="min-h-screen bg-gradient-to-br {{theme_bg}} p-8">
      <div className="max-w-3xl mx-auto text-center">
        <h1 className="text-4xl font-bold {{theme_text}} mb-2">{{title}}</h1>
        <p className="{{theme_accent}} text-lg mb-8">{IDEA}</p>

        <div className="flex justify-center gap-2 mb-6">
          {PRESETS.map(preset => (
            <button key={preset.label} onClick={() => selectPreset(preset.minutes)} className="{{theme_button}} px-4 py-2 rounded-lg">
              {preset.label}
            </button>
          ))}
        </div>

        <div className="{{theme_card}} rounded-xl p-10 shadow-lg mb-6">
          <div className={`text-7xl font-mono {{theme_text}} ${remaining === 0 ? 'animate-pulse' : ''}`}>
            {minutes}:{seconds}
          </div>
          <div className="flex justify-center gap-4 mt-6">
            <button onClick={() => setRunning(!running)} className="{{theme_button}} px-6 py-3 rounded-lg flex items-center gap-2">
              {running ? <Pause className="w-5 h-5" /> : <Play className="w-5 h-5" />}
              {running ? 'Pause' : 'Start'}
            </button>
            <button onClick={reset} className="bg-gray-100 text-gray-700 px-6 py-3 rounded-lg flex items-center gap-2">
              <RotateCcw className="w-5 h-5" />
              Reset
            </button>
          </div>
        </div>

        <div className="grid grid-cols-1 md:grid-cols-{{columns}} gap-3">
          {sessions.map((finishedAt, index) => (
            <div key={index} className="{{theme_card}} rounded-lg p-3 {{theme_accent}}">Session done at {finishedAt}</div>
          ))}
        </div>
      </div>
    </div>
  );
}
"""


CALCULATOR_APP = """import React, { useState } from 'react';

const IDEA = {{idea_js}};
const KEYS = ['7', '8', '9', '/', '4', '5', '6', '*', '1', '2', '3', '-', '0', '.', '=', '+'];

const compute = (left: number, right: number, op: string) => {
  switch (op) {
    case '+': return left + right;
    case '-': return left - right;
    case '*': return left * right;
    case '/': return right === 0 ? NaN : left / right;
    default: return right;
  }
};

export default function CalculatorApp() {
  const [display, setDisplay] = useState('0');
  const [stored, setStored] = useState<number | null>(null);
  const [operator, setOperator] = useState<string | null>(null);
  const [memory, setMemory] = useState(0);
  const [history, setHistory] = useState<string[]>([]);

  const press = (key: string) => {
    if (/[0-9.]/.test(key)) {
      setDisplay(display === '0' && key !== '.' ? key : display + key);
      return;
    }
    const value = parseFloat(display);
    if (key === '=') {
      if (stored === null || operator === null) return;
      const result = compute(stored, value, operator);
      setHistory([`${stored} ${operator} ${value} = ${result}`, ...history].slice(0, 10));
      setDisplay(String(result));
      setStored(null);
      setOperator(null);
      return;
    }
    setStored(stored === null || operator === null ? value : compute(stored, value, operator));
    setOperator(key);
    setDisplay('0');
  };

  const clear = () => {
    setDisplay('0');
    setStored(null);
    setOperator(null);
  };

  return (
    <div className="min-h-screen bg-gradient-to-br {{theme_bg}} p-8">
      <div className="max-w-4xl mx-auto">
        <header className="text-center mb-8">
          <h1 className="text-4xl font-bold {{theme_text}} mb-2">{{title}}</h1>
          <p className="{{theme_accent}} text-lg">{IDEA}</p>
        </header>
        <div className="grid grid-cols-1 md:grid-cols-2 gap-6">
          <div className="{{theme_card}} rounded-xl p-6 shadow-lg">
            <div className="text-right text-4xl font-mono {{theme_text}} mb-4 overflow-x-auto">{display}</div>
            <div className="grid grid-cols-4 gap-2 mb-2">
              <button onClick={() => setMemory(memory + parseFloat(display))} className="bg-gray-100 rounded-lg py-2">M+</button>
              <button onClick={() => setMemory(memory - parseFloat(display))} className="bg-gray-100 rounded-lg py-2">M-</button>
              <button onClick={() => setDisplay(String(memory))} className="bg-gray-100 rounded-lg py-2">MR</button>
              <button onClick={() => setMemory(0)} className="bg-gray-100 rounded-lg py-2">MC</button>
            </div>
            <div className="grid grid-cols-4 gap-2">
              {KEYS.map(key => (
                <button key={key} onClick={() => press(key)} className="{{theme_button}} rounded-lg py-3 text-xl">
                  {key}
                </button>
              ))}
            </div>
            <button onClick={clear} className="w-full mt-2 bg-red-500 text-white rounded-lg py-2">Clear</button>
          </div>
          <div className="{{theme_card}} rounded-xl p-6 shadow-lg">
            <h2 className="text-xl font-bold {{theme_text}} mb-4">History</h2>
            {history.length === 0 && <p className="{{theme_accent}}">No calculations yet.</p>}
            {history.map((line, index) => (
              <div key={index} className="font-mono {{theme_accent}} py-1">{line}</div>
            ))}
          </div>
        </div>
      </div>
    </div>
  );
}
"""


GENERIC_APP = """import React, { useState } from 'react';
import { Sparkles, Settings, Users, BarChart3 } from 'lucide-react';

const IDEA = {{idea_js}};
const HEADLINE = {{headline_js}};

export default function App() {
  const [activeTab, setActiveTab] = useState('dashboard');
  const [actions, setActions] = useState(142);

  return (
    <div className="min-h-screen bg-gradient-to-br {{theme_bg}} p-8">
      <div className="max-w-6xl mx-auto">
        <header className="text-center mb-8">
          <h1 className="text-4xl font-bold {{theme_text}} mb-4">{HEADLINE}</h1>
          <p className="{{theme_accent}} text-lg">{IDEA}</p>
        </header>

        <nav className="{{theme_card}} rounded-xl p-4 shadow-lg mb-8">
          <div className="flex gap-2 justify-center">
            {['dashboard', 'analytics', 'settings'].map(tab => (
              <button
                key={tab}
                onClick={() => setActiveTab(tab)}
                className={`px-4 py-2 rounded-lg font-medium capitalize ${
                  activeTab === tab ? '{{theme_button}}' : 'bg-gray-100 text-gray-700 hover:bg-gray-200'
                }`}
              >
                {tab}
              </button>
            ))}
          </div>
        </nav>

        <div className="grid grid-cols-1 md:grid-cols-{{columns}} gap-6">
{{feature_cards}}
        </div>

        {activeTab === 'analytics' && (
          <div className="{{theme_card}} rounded-xl p-8 shadow-lg mt-8">
            <h2 className="text-xl font-bold {{theme_text}} mb-6">Analytics Dashboard</h2>
            <div className="grid grid-cols-1 md:grid-cols-3 gap-6">
              <div className="text-center p-4 bg-gray-50 rounded-lg">
                <BarChart3 className="w-8 h-8 {{theme_accent}} mx-auto mb-2" />
                <div className="text-2xl font-bold {{theme_text}}">{actions}</div>
                <div className="text-sm {{theme_accent}}">Total Actions</div>
              </div>
              <div className="text-center p-4 bg-gray-50 rounded-lg">
                <Users className="w-8 h-8 {{theme_accent}} mx-auto mb-2" />
                <div className="text-2xl font-bold {{theme_text}}">28</div>
                <div className="text-sm {{theme_accent}}">Active Users</div>
              </div>
              <div className="text-center p-4 bg-gray-50 rounded-lg">
                <Settings className="w-8 h-8 {{theme_accent}} mx-auto mb-2" />
                <div className="text-2xl font-bold {{theme_text}}">95%</div>
                <div className="text-sm {{theme_accent}}">Success Rate</div>
              </div>
            </div>
          </div>
        )}
      </div>
    </div>
  );
}
"""


FEATURE_CARD = """          <div className="{{theme_card}} rounded-xl p-6 shadow-lg">
            <div className="flex items-center gap-3 mb-4">
              <div className="{{theme_button}} p-2 rounded-lg">
                <Sparkles className="w-5 h-5" />
              </div>
              <h3 className="font-semibold {{theme_text}}">{{feature_name}}</h3>
            </div>
            <p className="{{theme_accent}} mb-4">Interactive component for your {{app_type}} app functionality.</p>
            <button onClick={() => setActions(actions + 1)} className="{{theme_button}} px-4 py-2 rounded-lg font-medium">
              Take Action
            </button>
          </div>"""


APP_TEMPLATES = {
    AppCategory.TODO: TODO_APP,
    AppCategory.WEATHER: WEATHER_APP,
    AppCategory.HABIT_TRACKER: HABIT_APP,
    AppCategory.AUDIO_TRACKER: AUDIO_TRACKER_APP,
    AppCategory.TIMER: TIMER_APP,
    AppCategory.CALCULATOR: CALCULATOR_APP,
}


def render_template(template: str, values: dict) -> str:
    """Replace {{name}} placeholders in one pass; unknown names are a bug"""
    return _PLACEHOLDER.sub(lambda match: str(values[match.group(1)]), template)


def get_theme_palette(theme: str) -> dict:
    return THEME_PALETTES.get(theme, THEME_PALETTES[DEFAULT_PALETTE])


def get_app_features(category: AppCategory) -> list:
    return list(APP_FEATURES.get(category, DEFAULT_FEATURES))


def _template_values(request: GenerationRequest, category: AppCategory) -> dict:
    palette = get_theme_palette(request.theme)
    headline = request.idea[:50] + ("..." if len(request.idea) > 50 else "")
    values = {f"theme_{key}": value for key, value in palette.items()}
    values.update({
        "title": FALLBACK_TITLES.get(category, DEFAULT_TITLE),
        "idea_js": json.dumps(request.idea, ensure_ascii=False),
        "headline_js": json.dumps(headline, ensure_ascii=False),
        "columns": layout_columns(request.layout),
        "app_type": category.value,
    })
    return values


def generate_fallback_source(request: GenerationRequest, category: AppCategory) -> str:
    """TSX source for the category's fallback app"""
    values = _template_values(request, category)
    template = APP_TEMPLATES.get(category)
    if template is not None:
        return render_template(template, values)

    cards = []
    features = get_app_features(category)
    for i in range(values["columns"]):
        card_values = dict(values, feature_name=features[i % len(features)])
        cards.append(render_template(FEATURE_CARD, card_values))
    values["feature_cards"] = "\n".join(cards)
    return render_template(GENERIC_APP, values)


def synthesize_fallback(request: GenerationRequest, category: AppCategory) -> GeneratedAppDescription:
    """Complete app description built without any external call"""
    return GeneratedAppDescription(
        title=FALLBACK_TITLES.get(category, DEFAULT_TITLE),
        description=f"A {request.theme} {category.value} app: {request.idea}",
        app_type=category,
        source_code={"App": generate_fallback_source(request, category)},
        feature_list=get_app_features(category),
        theme_name=request.theme,
        layout_name=request.layout,
    )
